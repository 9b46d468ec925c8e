"""Point cloud processing filters."""

from pointprep.filters.base import Filter
from pointprep.filters.registry import filter_registry, get_filter

__all__ = ["Filter", "filter_registry", "get_filter"]
