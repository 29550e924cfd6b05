from .crime_categories import CategoryInfo, DEFAULT_CATEGORIES, make_categories, category_title

__all__ = [
    "CategoryInfo",
    "DEFAULT_CATEGORIES",
    "make_categories",
    "category_title",
]
