"""
Category to OSM tag mapping.

Static lookup; every category resolves to a filter, unknown ones fall back to
the broad ``ALL`` mapping.
"""
from typing import Dict, Optional, Union

from domain.models import Category, CategoryFilter

# 'caterer' stays in every mapping; restaurant/fast_food drop the shop group.
_ALL_FILTER = CategoryFilter(
    amenity=(
        "restaurant",
        "cafe",
        "fast_food",
        "food_court",
        "bar",
        "pub",
        "ice_cream",
        "biergarten",
    ),
    shop=("bakery", "pastry", "beverages", "food"),
    craft=("caterer",),
)

CATEGORY_FILTERS: Dict[Category, CategoryFilter] = {
    Category.ALL: _ALL_FILTER,
    Category.RESTAURANT: CategoryFilter(
        amenity=("restaurant", "food_court", "warmindo", "makan"),
        shop=(),
        craft=("caterer",),
    ),
    Category.CAFE: CategoryFilter(
        amenity=("cafe", "internet_cafe"),
        shop=("coffee", "tea", "bubble_tea"),
        craft=("caterer",),
    ),
    Category.FAST_FOOD: CategoryFilter(
        amenity=("fast_food",),
        shop=(),
        craft=("caterer",),
    ),
    # Kaki lima / pasar style vendors
    Category.STREET_FOOD: CategoryFilter(
        amenity=("street_vendor", "marketplace"),
        shop=_ALL_FILTER.shop,
        craft=("caterer",),
    ),
    Category.OTHER: _ALL_FILTER,
}


def map_category(category: Union[Category, str, None]) -> CategoryFilter:
    """Return the tag filter for a category identifier."""
    return CATEGORY_FILTERS.get(Category.parse(category), _ALL_FILTER)


def category_label(category: Union[Category, str, None]) -> Optional[str]:
    """Human readable label for guidance messages; None for the broad search."""
    parsed = Category.parse(category)
    if parsed in (Category.ALL, Category.OTHER):
        return None
    return parsed.value.replace("_", " ")
