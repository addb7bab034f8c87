from .service import intent_matches, slot_value_map, slots_match

__all__ = ["intent_matches", "slot_value_map", "slots_match"]
