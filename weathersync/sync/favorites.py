"""Favorite locations: case-insensitively unique, persisted as a whole list."""

import logging

from weathersync.storage.cache_store import LocalCacheStore

logger = logging.getLogger(__name__)


class FavoritesManager:
    def __init__(self, cache: LocalCacheStore):
        self.cache = cache

    def locations(self) -> list[str]:
        return self.cache.load_favorites()

    def is_favorite(self, location: str) -> bool:
        wanted = location.strip().casefold()
        return any(f.casefold() == wanted for f in self.locations())

    def add(self, location: str) -> bool:
        """Add a favorite. A differently-cased duplicate has its casing updated.

        Returns True when the stored list changed.
        """
        location = location.strip()
        if not location:
            return False
        favorites = self.locations()
        if location in favorites:
            return False
        wanted = location.casefold()
        if any(f.casefold() == wanted for f in favorites):
            favorites = [f for f in favorites if f.casefold() != wanted]
            logger.info("%s (casing updated) is a favorite", location)
        else:
            logger.info("%s added to favorites", location)
        favorites.append(location)
        self.cache.save_favorites(favorites)
        return True

    def remove(self, location: str) -> bool:
        """Remove a favorite and delete the cached payloads of every removed entry."""
        wanted = location.strip().casefold()
        favorites = self.locations()
        removed = [f for f in favorites if f.casefold() == wanted]
        if not removed:
            return False
        self.cache.save_favorites([f for f in favorites if f.casefold() != wanted])
        for entry in removed:
            self.cache.delete_for(entry)
        logger.info("%s removed from favorites", location)
        return True

    def toggle(self, location: str) -> bool:
        """Flip favorite status. Returns whether the location is now a favorite."""
        if self.is_favorite(location):
            self.remove(location)
            return False
        return self.add(location)
