"""Filter registry and discovery."""

from __future__ import annotations

from typing import Any

from pointprep.filters.base import Filter


class FilterRegistry:
    """Registry for filter classes, keyed by type name."""

    def __init__(self) -> None:
        self._filters: dict[str, type[Filter]] = {}

    def register(self, cls: type[Filter]) -> None:
        self._filters[cls.type_name()] = cls

    def get(self, type_name: str, **options: Any) -> Filter:
        """Create a filter instance by type name."""
        if type_name not in self._filters:
            raise ValueError(
                f"Unknown filter '{type_name}'. "
                f"Available: {list(self._filters.keys())}"
            )
        return self._filters[type_name](**options)

    @property
    def available(self) -> list[str]:
        return list(self._filters.keys())


# Global registry
filter_registry = FilterRegistry()

_registered = False


def _ensure_registered() -> None:
    """Import built-in filters so they register themselves."""
    global _registered
    if _registered:
        return
    _registered = True

    from pointprep.filters import normal as _normal  # noqa: F401
    from pointprep.filters import orient as _orient  # noqa: F401
    from pointprep.filters import smooth as _smooth  # noqa: F401
    from pointprep.filters import preprocess as _preprocess  # noqa: F401


def get_filter(type_name: str, **options: Any) -> Filter:
    """Get a filter instance by type name (convenience function)."""
    _ensure_registered()
    return filter_registry.get(type_name, **options)
