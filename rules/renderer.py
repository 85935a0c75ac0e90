from __future__ import annotations

import re
from typing import Any, Dict, Mapping, Optional

# {{ name }}, plus the unescaped {{{ name }}} and {{& name }} forms.
PLACEHOLDER_PATTERN = re.compile(
    r"\{\{\{\s*(?P<triple>[^{}\s]+)\s*\}\}\}"
    r"|\{\{&?\s*(?P<name>[^{}\s&]+)\s*\}\}"
)


def decompose_email(profile: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Replace a flat ``email`` value with its parts so templates can use
    ``email.username``, ``email.domain`` and ``email.rootdomain``.
    """
    result = dict(profile)
    email = result.get("email")
    if not isinstance(email, str) or "@" not in email:
        return result

    username, _, domain = email.partition("@")
    labels = domain.split(".")
    rootdomain = ".".join(labels[-2:]) if len(labels) > 2 else domain
    result["email"] = {
        "full": email,
        "email": email,
        "username": username,
        "domain": domain,
        "rootdomain": rootdomain,
    }
    return result


def _lookup(profile: Mapping[str, Any], name: str) -> str:
    value: Any = profile
    for part in name.split("."):
        if not isinstance(value, Mapping) or part not in value:
            return ""
        value = value[part]
    # Nested groups have no single text form.
    if isinstance(value, Mapping):
        return ""
    return str(value)


def apply_replacements(text: str, replacements: Mapping[str, str]) -> str:
    """Literal find/replace of every key at once; longer keys win and results are not rescanned."""
    keys = sorted((key for key in replacements if key), key=len, reverse=True)
    if not keys:
        return text
    pattern = re.compile("|".join(re.escape(key) for key in keys))
    return pattern.sub(lambda match: replacements[match.group(0)], text)


def render(
    template: str,
    profile: Mapping[str, Any],
    replacements: Optional[Mapping[str, str]] = None,
) -> str:
    name = PLACEHOLDER_PATTERN.sub(
        lambda match: _lookup(profile, match.group("triple") or match.group("name")), template
    )
    if replacements:
        name = apply_replacements(name, replacements)
    return name
