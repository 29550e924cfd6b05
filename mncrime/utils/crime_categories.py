"""Category metadata for the Minneapolis Part I crime counts."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Union


@dataclass(frozen=True)
class CategoryInfo:
    title: str
    description: Optional[str] = None


# Column keys match the aggregate crime table in the remote data store.
DEFAULT_CATEGORIES: Mapping[str, CategoryInfo] = MappingProxyType({
    "homicide": CategoryInfo("Homicide"),
    "rape": CategoryInfo("Rape"),
    "robbery": CategoryInfo("Robbery"),
    "agg_assault": CategoryInfo("Aggravated Assault"),
    "burglary": CategoryInfo("Burglary"),
    "larceny": CategoryInfo("Larceny", "Theft, excluding motor vehicles"),
    "auto_theft": CategoryInfo("Auto Theft"),
    "arson": CategoryInfo("Arson"),
})


def make_categories(
    categories: Mapping[str, Union[CategoryInfo, Mapping[str, str], str]],
) -> Mapping[str, CategoryInfo]:
    """Build a read-only category mapping from plain titles, dicts or CategoryInfo."""
    built: dict[str, CategoryInfo] = {}
    for key, meta in categories.items():
        if isinstance(meta, CategoryInfo):
            built[key] = meta
        elif isinstance(meta, str):
            built[key] = CategoryInfo(meta)
        else:
            built[key] = CategoryInfo(meta.get("title", key), meta.get("description"))
    return MappingProxyType(built)


def category_title(categories: Mapping[str, CategoryInfo], key: str) -> str:
    """Display title for a category key, falling back to the key itself."""
    info = categories.get(key)
    return info.title if info else key


__all__ = ["CategoryInfo", "DEFAULT_CATEGORIES", "make_categories", "category_title"]
