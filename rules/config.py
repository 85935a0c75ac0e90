from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Mapping, Optional

from .parser import DEFAULT_DELIMITER, DELIMITERS

COMPONENT_NAME = "local_cohortauto"

TRUTHY_VALUES = {"1", "true", "yes", "on"}


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY_VALUES
    return bool(value)


def _as_text(value: Any, default: str) -> str:
    if value is None:
        return default
    return str(value)


@dataclass(frozen=True)
class RuleConfiguration:
    """Rule settings for one invocation; keys match the persisted setting names."""

    mainrule_fld: str = ""
    secondrule_fld: str = "n/a"
    replace_arr: str = ""
    delim: str = DEFAULT_DELIMITER
    donttouchusers: str = ""
    enableunenrol: bool = False

    @classmethod
    def from_settings(cls, settings: Optional[Mapping[str, Any]] = None) -> "RuleConfiguration":
        settings = settings or {}
        defaults = cls()
        delim = _as_text(settings.get("delim"), defaults.delim)
        if delim not in DELIMITERS:
            delim = defaults.delim
        return cls(
            mainrule_fld=_as_text(settings.get("mainrule_fld"), defaults.mainrule_fld),
            secondrule_fld=_as_text(settings.get("secondrule_fld"), defaults.secondrule_fld),
            replace_arr=_as_text(settings.get("replace_arr"), defaults.replace_arr),
            delim=delim,
            donttouchusers=_as_text(settings.get("donttouchusers"), defaults.donttouchusers),
            enableunenrol=_as_bool(settings.get("enableunenrol", defaults.enableunenrol)),
        )

    @property
    def ignored_usernames(self) -> List[str]:
        return [name.strip() for name in self.donttouchusers.split(",") if name.strip()]

    def as_settings(self) -> Dict[str, Any]:
        return asdict(self)

