"""Pattern catalog used to classify interactive prompts."""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping


class CatalogError(ValueError):
    """Raised when a catalog definition cannot be loaded."""


def _contains_any(text: str, patterns: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(pattern.lower() in lowered for pattern in patterns)


@dataclass(frozen=True, slots=True)
class PromptPatternCatalog:
    """Ordered pattern groups, matched as case-insensitive substrings."""

    require_user_patterns: tuple[str, ...] = (
        "api key",
        "password",
        "credential",
        "authentication",
        "secret",
        "token",
        "delete file",
        "remove file",
        "overwrite existing",
        "force push",
    )
    auto_approve_patterns: tuple[str, ...] = (
        "do you want to create a claude.md file",
        "would you like me to commit these changes",
        "do you want me to add comments to this code",
        "start a new session",
        "do you want to see more examples",
    )
    auto_decline_patterns: tuple[str, ...] = (
        "clear all settings",
        "erase",
    )
    critical_vocabulary: tuple[str, ...] = (
        "delete",
        "remove",
        "overwrite",
        "permanent",
        "force",
    )

    def matches_require_user(self, text: str) -> bool:
        return _contains_any(text, self.require_user_patterns)

    def matches_auto_approve(self, text: str) -> bool:
        return _contains_any(text, self.auto_approve_patterns)

    def matches_auto_decline(self, text: str) -> bool:
        return _contains_any(text, self.auto_decline_patterns)

    def is_critical(self, text: str) -> bool:
        """Return True if the text mentions a destructive action."""
        return _contains_any(text, self.critical_vocabulary)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> PromptPatternCatalog:
        """Build a catalog from a mapping; absent groups keep their defaults.

        Raises:
            CatalogError: on unknown keys or groups that are not lists of strings.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise CatalogError(f"unknown catalog keys: {', '.join(sorted(unknown))}")

        groups: dict[str, tuple[str, ...]] = {}
        for key, value in data.items():
            if isinstance(value, str) or not isinstance(value, (list, tuple)):
                raise CatalogError(f"{key} must be a list of strings")
            if not all(isinstance(item, str) and item.strip() for item in value):
                raise CatalogError(f"{key} must contain non-empty strings only")
            groups[key] = tuple(item.strip() for item in value)
        return cls(**groups)


DEFAULT_CATALOG = PromptPatternCatalog()


def load_catalog(path: str | Path) -> PromptPatternCatalog:
    """Load a catalog from a JSON object file."""
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as fh:
            parsed = json.load(fh)
    except OSError as exc:
        raise CatalogError(f"cannot read catalog file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise CatalogError(f"invalid JSON in catalog file {path}: {exc}") from exc
    if not isinstance(parsed, dict):
        raise CatalogError(f"catalog file {path} must contain a JSON object")
    return PromptPatternCatalog.from_mapping(parsed)
