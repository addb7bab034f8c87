"""
'comparator/service.py': Expected-vs-recognized comparison for NLU results.
"""
from typing import Any, Dict, List, Optional


def intent_matches(recognized_intent: Optional[str], expected_intent: Optional[str]) -> bool:
    """Exact, case-sensitive equality after trimming surrounding whitespace on both sides."""
    if recognized_intent is None or expected_intent is None:
        return False
    return recognized_intent.strip() == expected_intent.strip()


def slot_value_map(slots: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Map slot name to its resolved value, falling back to the raw value."""
    values: Dict[str, Any] = {}
    for slot in slots or []:
        if not isinstance(slot, dict) or "name" not in slot:
            continue
        value = slot.get("value")
        if isinstance(value, dict):
            values[slot["name"]] = value.get("resolved") or value.get("raw")
        else:
            values[slot["name"]] = value
    return values


def slots_match(expected_slots: Dict[str, str], slots: List[Dict[str, Any]]) -> bool:
    """
    Check every expected slot against the recognized ones.

    No expectation is vacuously satisfied, extra recognized slots are accepted.
    The first missing or differing slot fails the whole utterance.
    """
    if not expected_slots:
        return True

    actual = slot_value_map(slots)
    for name, expected_value in expected_slots.items():
        actual_value = actual.get(name)
        if actual_value is None or actual_value == "" or str(actual_value) != expected_value:
            return False
    return True
