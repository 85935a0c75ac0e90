from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping

logger = logging.getLogger(__name__)

DELIMITERS: Dict[str, str] = {
    "CR+LF": "\r\n",
    "CR": "\r",
    "LF": "\n",
}
DEFAULT_DELIMITER = "CR+LF"

SPLIT_PATTERN = re.compile(r"(?P<full>%split\((?P<field>\w*)\|(?P<separator>.{1,5})\))")


@dataclass
class ParsedRules:
    templates: List[str]
    profile: Dict[str, Any]


def resolve_delimiter(name: str) -> str:
    """Map a configured delimiter name to its separator, defaulting to CR+LF."""
    return DELIMITERS.get(name, DELIMITERS[DEFAULT_DELIMITER])


def parse_replacements(replacements: str, delimiter: str) -> Dict[str, str]:
    """Read ``key|value`` pairs; anything that is not exactly two parts is dropped."""
    pairs: Dict[str, str] = {}
    if not replacements:
        return pairs
    for item in replacements.split(delimiter):
        parts = item.split("|")
        if len(parts) != 2:
            logger.debug("Ignoring malformed replacement %r", item)
            continue
        pairs[parts[0]] = parts[1]
    return pairs


def parse_rules(mainrule: str, delimiter: str, profile: Mapping[str, Any]) -> ParsedRules:
    """
    Expand the main rule into the list of templates to render for one user.

    Each ``%split(field|sep)`` item is replaced by one template per part of the
    field's value, bound to the synthetic fields ``field_0``, ``field_1``, ...
    The returned profile is a copy of ``profile`` extended with those fields.
    Items referencing a missing or non-text field produce no templates.
    """
    extended: Dict[str, Any] = dict(profile)
    templates: List[str] = []
    if not mainrule:
        return ParsedRules(templates=templates, profile=extended)

    for item in mainrule.split(delimiter):
        match = SPLIT_PATTERN.search(item)
        if not match:
            templates.append(item)
            continue

        field = match.group("field")
        value = extended.get(field)
        if not isinstance(value, str):
            logger.debug("Split field %r is not available; skipping %r", field, item)
            continue

        for index, part in enumerate(value.split(match.group("separator"))):
            synthetic = f"{field}_{index}"
            extended[synthetic] = part
            templates.append(item.replace(match.group("full"), "{{ " + synthetic + " }}"))

    return ParsedRules(templates=templates, profile=extended)
