"""Favorites persistence.

The list lives in a single JSON file; :class:`FavoritesStore` owns every read
and write of that file.
"""

from .store import FavoritesPage, FavoritesStore

__all__ = [
    "FavoritesPage",
    "FavoritesStore",
]
