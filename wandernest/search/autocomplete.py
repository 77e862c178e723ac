"""Live suggestion state for a single destination search box."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import Enum
from typing import Protocol

from wandernest.events import EventEmitter
from wandernest.models import DestinationRecord
from wandernest.navigation import destination_path, search_path

from .index import FuzzyIndex

logger = logging.getLogger(__name__)

SUGGESTION_LIMIT = 8


class AutocompleteStatus(str, Enum):
    IDLE = "idle"
    TYPING = "typing"
    SHOWING_SUGGESTIONS = "showing_suggestions"
    NO_RESULTS = "no_results"


class AutocompleteEvent(Enum):
    CHANGE = "change"  # (state)
    SELECT = "select"  # (record)
    SEARCH = "search"  # (query)
    NAVIGATE = "navigate"  # (path)


class Key(str, Enum):
    ARROW_DOWN = "ArrowDown"
    ARROW_UP = "ArrowUp"
    ENTER = "Enter"
    ESCAPE = "Escape"


@dataclass(frozen=True)
class AutocompleteState:
    query: str = ""
    suggestions: tuple[DestinationRecord, ...] = ()
    highlighted_index: int = -1
    visible: bool = False
    status: AutocompleteStatus = AutocompleteStatus.IDLE
    selected: DestinationRecord | None = None

    @property
    def highlighted(self) -> DestinationRecord | None:
        if 0 <= self.highlighted_index < len(self.suggestions):
            return self.suggestions[self.highlighted_index]
        return None

    @property
    def show_no_results(self) -> bool:
        return self.visible and self.status == AutocompleteStatus.NO_RESULTS


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything with an asyncio-style ``call_later``, e.g. an event loop."""

    def call_later(self, delay: float, callback: Callable[..., None], *args) -> TimerHandle: ...


class AutocompleteController:
    """
    Turns keystrokes into a navigable suggestion list backed by a FuzzyIndex.

    State changes are published as AutocompleteEvent.CHANGE with the new
    immutable AutocompleteState. Searches can be debounced through a
    scheduler; each input bumps a sequence number so a stale search never
    overwrites the result of a newer query.
    """

    def __init__(
        self,
        index: FuzzyIndex,
        *,
        limit: int = SUGGESTION_LIMIT,
        on_select: Callable[[DestinationRecord], None] | None = None,
        on_search: Callable[[str], None] | None = None,
        navigate: Callable[[str], None] | None = None,
        debounce: float = 0.0,
        scheduler: Scheduler | None = None,
    ):
        if debounce > 0 and scheduler is None:
            raise ValueError("A scheduler is required when debounce is enabled")

        self.index = index
        self.limit = limit
        self.on_select = on_select
        self.on_search = on_search
        self.navigate = navigate
        self.debounce = debounce
        self.scheduler = scheduler
        self.events = EventEmitter()

        self._state = AutocompleteState()
        self._sequence = 0
        self._pending: TimerHandle | None = None
        # Query the current suggestions were computed for.
        self._suggestions_query: str | None = None

    @property
    def state(self) -> AutocompleteState:
        return self._state

    @property
    def sequence(self) -> int:
        return self._sequence

    def subscribe(self, event: AutocompleteEvent, callback: Callable[..., None]) -> Callable[[], None]:
        return self.events.subscribe(event, callback)

    def _update(self, **changes) -> None:
        self._state = replace(self._state, **changes)
        self.events.emit(AutocompleteEvent.CHANGE, self._state)

    def _is_searchable(self, query: str) -> bool:
        return len(query.strip()) >= self.index.min_match_char_length

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    # Input

    def set_query(self, text: str) -> None:
        """Handle an input change."""
        self._sequence += 1
        self._cancel_pending()

        if not self._is_searchable(text):
            self._suggestions_query = None
            self._update(
                query=text,
                suggestions=(),
                highlighted_index=-1,
                visible=False,
                status=AutocompleteStatus.IDLE,
                selected=None,
            )
            return

        self._update(query=text, status=AutocompleteStatus.TYPING, selected=None)

        if self.debounce > 0:
            self._pending = self.scheduler.call_later(
                self.debounce, self._run_search, self._sequence, text
            )
        else:
            self._run_search(self._sequence, text)

    def _run_search(self, sequence: int, query: str) -> None:
        if sequence != self._sequence:
            logger.debug("Discarding stale suggestions for %r", query)
            return

        self._pending = None
        suggestions = tuple(self.index.search_records(query, limit=self.limit))
        self._suggestions_query = query
        self._update(
            suggestions=suggestions,
            highlighted_index=-1,
            visible=True,
            status=(
                AutocompleteStatus.SHOWING_SUGGESTIONS
                if suggestions
                else AutocompleteStatus.NO_RESULTS
            ),
        )

    def flush(self) -> None:
        """Run a pending debounced search immediately."""
        if self._pending is not None:
            self._cancel_pending()
            self._run_search(self._sequence, self._state.query)

    def clear(self) -> None:
        """Empty the box and hide the panel."""
        self._sequence += 1
        self._cancel_pending()
        self._suggestions_query = None
        self._update(
            query="",
            suggestions=(),
            highlighted_index=-1,
            visible=False,
            status=AutocompleteStatus.IDLE,
            selected=None,
        )

    # Focus

    def focus(self) -> None:
        """Re-open the panel for a query that is still long enough."""
        query = self._state.query
        if not self._is_searchable(query) or self._state.visible:
            return
        if self._suggestions_query != query:
            self._sequence += 1
            self._cancel_pending()
            self._run_search(self._sequence, query)
            return

        suggestions = self._state.suggestions
        self._update(
            visible=True,
            highlighted_index=-1,
            status=(
                AutocompleteStatus.SHOWING_SUGGESTIONS
                if suggestions
                else AutocompleteStatus.NO_RESULTS
            ),
        )

    def close(self) -> None:
        """Hide the panel, keeping the typed text and computed suggestions."""
        if not self._state.visible and self._state.status == AutocompleteStatus.IDLE:
            return
        self._update(visible=False, highlighted_index=-1, status=AutocompleteStatus.IDLE)

    def click_outside(self) -> None:
        self.close()

    blur = click_outside

    # Keyboard

    def key_down(self, key: Key | str) -> bool:
        """
        Apply a key press.

        Returns:
            True if the key was handled by the search box
        """
        try:
            key = Key(key)
        except ValueError:
            return False

        showing = (
            self._state.status == AutocompleteStatus.SHOWING_SUGGESTIONS
            and self._state.visible
            and bool(self._state.suggestions)
        )

        if key == Key.ESCAPE:
            self.close()
            return True

        if not showing:
            if key == Key.ENTER:
                self.submit()
                return True
            return False

        last = len(self._state.suggestions) - 1
        if key == Key.ARROW_DOWN:
            self._update(highlighted_index=min(self._state.highlighted_index + 1, last))
        elif key == Key.ARROW_UP:
            self._update(highlighted_index=max(self._state.highlighted_index - 1, -1))
        elif key == Key.ENTER:
            highlighted = self._state.highlighted
            if highlighted is not None:
                self.commit(highlighted)
            else:
                self.submit()
        return True

    def click_suggestion(self, index: int) -> None:
        """Pointer selection of a suggestion row."""
        if not 0 <= index < len(self._state.suggestions):
            return
        self._update(highlighted_index=index)
        self.commit(self._state.suggestions[index])

    # Outcomes

    def commit(self, record: DestinationRecord) -> None:
        """Accept ``record`` as the selection and close the panel."""
        self._sequence += 1
        self._cancel_pending()
        self._update(
            query=record.name,
            selected=record,
            visible=False,
            highlighted_index=-1,
            status=AutocompleteStatus.IDLE,
        )
        self.events.emit(AutocompleteEvent.SELECT, record)

        if self.on_select is not None:
            self.on_select(record)
        else:
            self._navigate(destination_path(record.id))

    def submit(self) -> None:
        """Submit the raw query text as a free-form search."""
        query = self._state.query.strip()
        if not query:
            return

        self._sequence += 1
        self._cancel_pending()
        self._update(visible=False, highlighted_index=-1, status=AutocompleteStatus.IDLE)
        self.events.emit(AutocompleteEvent.SEARCH, query)

        if self.on_search is not None:
            self.on_search(query)
        else:
            self._navigate(search_path(query))

    def _navigate(self, path: str) -> None:
        logger.debug("Navigating to %s", path)
        self.events.emit(AutocompleteEvent.NAVIGATE, path)
        if self.navigate is not None:
            self.navigate(path)
