"""
Extractor Options

Per-site category toggles read before inclusion filtering.
"""

from dataclasses import dataclass, fields
from typing import Any, Mapping

# Wire/config key -> attribute name
OPTION_KEYS = {
    "includePontaManagement": "include_ponta_management",
    "includeVPointInvestment": "include_vpoint_investment",
}


@dataclass(frozen=True)
class ExtractorOptions:
    """Optional transaction categories; every toggle defaults to off."""

    include_ponta_management: bool = False
    include_vpoint_investment: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "ExtractorOptions":
        """Build options from a config or request mapping.

        Accepts both the camelCase keys used by the browser side and the
        attribute names. Unknown keys are ignored.
        """
        if not data:
            return cls()

        attribute_names = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            name = OPTION_KEYS.get(key, key)
            if name in attribute_names:
                values[name] = bool(value)
        return cls(**values)

    def merged(self, overrides: Mapping[str, Any] | None) -> "ExtractorOptions":
        """Return a copy with the given toggles overridden."""
        current = self.as_dict()
        current.update(overrides or {})
        return ExtractorOptions.from_mapping(current)

    def as_dict(self) -> dict[str, bool]:
        """Toggles keyed by their camelCase option names."""
        return {key: getattr(self, attr) for key, attr in OPTION_KEYS.items()}
