from __future__ import annotations

import re
from typing import Any, Callable, Dict, List, Mapping, Tuple, Union

REJECTED_KEYS = frozenset(
    {
        "ajax_updatable_user_prefs",
        "sesskey",
        "preference",
        "editing",
        "access",
        "message_lastpopup",
        "enrol",
    }
)
MAX_VALUE_LENGTH = 100
DEFAULT_PLACEHOLDER = "EMPTY"

TAG_PATTERN = re.compile(r"<[^>]*>")

SanitizedValue = Union[str, Dict[str, Any]]


def format_string(text: str) -> str:
    """Display formatting for a profile value: markup is stripped, whitespace trimmed."""
    return TAG_PATTERN.sub("", text).strip()


def _is_composite(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple))


def _items(value: Any) -> List[Tuple[str, Any]]:
    if isinstance(value, Mapping):
        return [(str(key), val) for key, val in value.items()]
    return [(str(index), val) for index, val in enumerate(value)]


def _stringify(value: Any, placeholder: str, formatter: Callable[[str], str]) -> str:
    if value is True:
        text = "true"
    elif value is False:
        text = "false"
    elif value is None or value == "" or value == " ":
        text = placeholder
    else:
        text = formatter(str(value)) or placeholder
    return text[:MAX_VALUE_LENGTH]


def prepare_profile_data(
    data: Any,
    placeholder: str = DEFAULT_PLACEHOLDER,
    formatter: Callable[[str], str] = format_string,
) -> SanitizedValue:
    """
    Flatten a raw user record into template-safe values.

    Mappings and lists become dicts keyed by field name (or list index), with the
    keys in ``REJECTED_KEYS`` dropped at every depth. Scalars become strings of at
    most ``MAX_VALUE_LENGTH`` characters; empty values become ``placeholder``.
    An empty composite collapses to ``placeholder`` as well.
    """
    if not _is_composite(data):
        return _stringify(data, placeholder, formatter)

    cleaned: Dict[str, Any] = {}
    for key, value in _items(data):
        if key in REJECTED_KEYS:
            continue
        if _is_composite(value):
            cleaned[key] = prepare_profile_data(value, placeholder, formatter)
        else:
            cleaned[key] = _stringify(value, placeholder, formatter)

    if not cleaned:
        return placeholder[:MAX_VALUE_LENGTH]
    return cleaned


def describe_fields(data: SanitizedValue, prefix: str = "") -> List[Tuple[str, str]]:
    """Dotted template field names with their values, in profile order."""
    if not isinstance(data, dict):
        return [(prefix, data)]

    fields: List[Tuple[str, str]] = []
    for key, value in data.items():
        name = f"{prefix}.{key}" if prefix else key
        fields.extend(describe_fields(value, name))
    return fields
