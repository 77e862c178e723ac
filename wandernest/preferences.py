"""Shared user preferences with change notification."""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

from wandernest.events import EventEmitter
from wandernest.models import DestinationRecord, UserPreferences
from wandernest.storage.json_store import JSONStore

logger = logging.getLogger(__name__)


class PreferenceEvent(Enum):
    LANGUAGE = "language"  # (language)
    CURRENCY = "currency"  # (currency)
    WISHLIST = "wishlist"  # (wishlist ids)


class PreferenceStore:
    """
    Holds the language, currency and wishlist that many views read.

    One instance is created at startup and handed to whatever needs it.
    Every mutation goes through a setter, notifies subscribers, and is
    written back to the JSON store when one is attached.
    """

    def __init__(
        self,
        preferences: UserPreferences | None = None,
        store: JSONStore | None = None,
        profile: str = "default",
    ):
        self.store = store
        self.profile = profile
        if preferences is None and store is not None:
            preferences = store.load_preferences(profile)
        self._preferences = preferences or UserPreferences()
        self.events = EventEmitter()

    @property
    def preferences(self) -> UserPreferences:
        return self._preferences.model_copy(deep=True)

    @property
    def language(self) -> str:
        return self._preferences.language

    @property
    def currency(self) -> str:
        return self._preferences.currency

    @property
    def wishlist(self) -> list[int]:
        return list(self._preferences.wishlist)

    def subscribe(self, event: PreferenceEvent, callback: Callable[..., None]) -> Callable[[], None]:
        return self.events.subscribe(event, callback)

    def _save(self) -> None:
        if self.store is not None:
            self.store.save_preferences(self._preferences, self.profile)

    def set_language(self, language: str) -> None:
        if language == self._preferences.language:
            return
        self._preferences = self._preferences.model_copy(update={"language": language})
        self._save()
        self.events.emit(PreferenceEvent.LANGUAGE, language)

    def set_currency(self, currency: str) -> None:
        currency = currency.upper()
        if currency == self._preferences.currency:
            return
        self._preferences = self._preferences.model_copy(update={"currency": currency})
        self._save()
        self.events.emit(PreferenceEvent.CURRENCY, currency)

    def _set_wishlist(self, wishlist: list[int]) -> None:
        self._preferences = self._preferences.model_copy(update={"wishlist": wishlist})
        self._save()
        self.events.emit(PreferenceEvent.WISHLIST, list(wishlist))

    def is_in_wishlist(self, destination_id: int) -> bool:
        return destination_id in self._preferences.wishlist

    def add_to_wishlist(self, destination_id: int) -> None:
        if self.is_in_wishlist(destination_id):
            return
        self._set_wishlist(self._preferences.wishlist + [destination_id])

    def remove_from_wishlist(self, destination_id: int) -> None:
        if not self.is_in_wishlist(destination_id):
            return
        self._set_wishlist([i for i in self._preferences.wishlist if i != destination_id])

    def toggle_wishlist(self, destination: DestinationRecord) -> bool:
        """
        Add or remove a destination.

        Returns:
            True if the destination is now in the wishlist
        """
        if self.is_in_wishlist(destination.id):
            self.remove_from_wishlist(destination.id)
            logger.info("Removed %s from wishlist", destination.name)
            return False
        self.add_to_wishlist(destination.id)
        logger.info("Added %s to wishlist", destination.name)
        return True

    @property
    def wishlist_count(self) -> int:
        return len(self._preferences.wishlist)
