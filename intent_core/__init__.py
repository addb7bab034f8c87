"""
IntentGuard core: sessions, platform client, batch testing, reports and utterance generation.
"""
