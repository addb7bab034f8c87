"""
Prompt builders for utterance and description generation.
"""
import json
from typing import Any, Dict, List, Optional

LANGUAGE_NAMES = {
    "en-US": "English (US)",
    "en-GB": "English (UK)",
    "es-ES": "Spanish (Spain)",
    "es-MX": "Spanish (Mexico)",
    "fr-FR": "French",
    "de-DE": "German",
    "it-IT": "Italian",
    "pt-BR": "Portuguese (Brazil)",
    "nl-NL": "Dutch",
    "ja-JP": "Japanese",
}

UTTERANCES_PER_INTENT = 10

_STYLE_RULES = [
    "Some utterances should include slot values naturally, while others should not. Not every utterance is required "
    "to mention a slot, even if one is defined. Slot values should be incorporated in a conversational way, like a "
    "real customer would speak.",
    "",
    "Mix of realism and errors:",
    "- The utterances should be a balanced mix of:",
    "  - Correctly written utterances (natural, grammatically fine)",
    "  - Slightly imperfect ones (informal tone, mild typos, grammar mistakes, or missing punctuation)",
    "- Do not make all utterances sloppy or typo-heavy; around 40-50% can have informal issues or typos.",
]

_OUTPUT_FORMAT = [
    "Output format:",
    'Return a JSON object with an "utterances" array, no explanations, no markdown.',
    "Each object must have:",
    '- "text": the user input string',
    '- "expected_intent": the name of the intent',
    '- "expected_slots": an object showing slot-value pairs (or an empty object if no slots apply)',
    "",
    "Example structure:",
    json.dumps(
        {
            "utterances": [
                {
                    "text": "i wanna open a checking accnt",
                    "expected_intent": "account_opening",
                    "expected_slots": {"account_type": "checking"},
                }
            ]
        },
        indent=2,
    ),
]


def language_name(language: str) -> str:
    return LANGUAGE_NAMES.get(language, language)


def describe_intents(intents: List[Dict[str, Any]]) -> List[str]:
    """One numbered block per intent with its slots; list-typed slots enumerate their values."""
    lines: List[str] = []
    for index, intent in enumerate(intents, start=1):
        lines.append(f"{index}. {intent.get('name')}")
        slots = intent.get("slots") or {}
        if isinstance(slots, dict) and slots:
            for slot_name, slot_values in slots.items():
                is_list = isinstance(slot_values, list)
                lines.append(f"   - Slot: {slot_name}")
                lines.append(f"     - Type: {'list' if is_list else 'string'}")
                if is_list and slot_values:
                    lines.append("     - Values: [" + ", ".join(f'"{value}"' for value in slot_values) + "]")
        else:
            lines.append("   - No slots")
        lines.append("")
    return lines


def build_generation_prompt(intents: List[Dict[str, Any]], language: str) -> str:
    parts = [
        "You are a conversational AI testing assistant. I will provide you with a list of intents, some of which "
        f"include slots. Your task is to generate {UTTERANCES_PER_INTENT} realistic user utterances per intent in "
        f"{language_name(language)}. The output should be a flat list, where each utterance is labeled with its "
        "expected intent and, if applicable, the expected slot(s) and their values.",
        "",
        *_STYLE_RULES,
        "",
        *_OUTPUT_FORMAT,
        "",
        "---",
        "",
        "### Intents and Slots:",
        "",
        *describe_intents(intents),
        f"Now generate {UTTERANCES_PER_INTENT} varied utterances per intent, as described above, mixing formal and "
        "informal phrasing.",
    ]
    return "\n".join(parts)


def _existing_line(utterance: Dict[str, Any]) -> str:
    text = utterance.get("text") or utterance.get("utterance")
    intent = utterance.get("expected_intent") or utterance.get("intent")
    slots = json.dumps(utterance.get("expected_slots") or {})
    return f'- "{text}" (Intent: {intent}, Slots: {slots})'


def build_more_prompt(intents: List[Dict[str, Any]], language: str, existing_utterances: List[Dict[str, Any]]) -> str:
    parts = [
        "You are a conversational AI testing assistant. I will provide you with a list of intents, some of which "
        f"include slots. Your task is to generate {UTTERANCES_PER_INTENT} MORE realistic user utterances per intent "
        f"in {language_name(language)}.",
        "",
        "IMPORTANT: DO NOT DUPLICATE any of the existing utterances listed below.",
        "",
        *_STYLE_RULES,
        "",
        *_OUTPUT_FORMAT,
        "",
        "---",
        "",
        "### Intents and Slots:",
        "",
        *describe_intents(intents),
        "### EXISTING UTTERANCES (DO NOT DUPLICATE THESE):",
        "",
        *(_existing_line(utterance) for utterance in existing_utterances),
        "",
        f"Now generate {UTTERANCES_PER_INTENT} MORE varied utterances per intent that are DIFFERENT from the existing "
        'ones listed above. Return the result as a valid JSON object with the "utterances" array.',
    ]
    return "\n".join(parts)


def build_description_prompt(intents: List[Dict[str, Any]], entities: Optional[List[Dict[str, Any]]] = None) -> str:
    parts = [
        "You are an expert in conversational AI and chatbot analysis. Based on the following list of intents and "
        "entities, generate a concise but informative description of what this bot can do. The description should "
        "be around 2-3 sentences and focus on the bot's main capabilities.",
        "",
        "Intents:",
    ]
    for intent in intents:
        line = f"- {intent.get('name')}"
        if intent.get("description"):
            line += f": {intent['description']}"
        references = intent.get("entityReferences") or []
        if references:
            line += f" (Uses entities: {', '.join(references)})"
        parts.append(line)

    if entities:
        parts.extend(["", "Entities:"])
        parts.extend(f"- {entity.get('name')} ({entity.get('type')})" for entity in entities)

    parts.extend([
        "",
        "Write a natural description that explains the bot's purpose, main functionalities, and data collection "
        "capabilities to a business user.",
    ])
    return "\n".join(parts)
