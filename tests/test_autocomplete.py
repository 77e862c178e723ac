"""Tests for the autocomplete controller."""

import pytest

from wandernest.search.autocomplete import (
    AutocompleteController,
    AutocompleteEvent,
    AutocompleteStatus,
    Key,
)
from wandernest.search.index import FuzzyIndex


class FakeTimer:
    def __init__(self, callback, args):
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.callback(*self.args)


class FakeScheduler:
    """Records call_later requests; tests fire them by hand."""

    def __init__(self):
        self.timers = []

    def call_later(self, delay, callback, *args):
        timer = FakeTimer(callback, args)
        self.timers.append(timer)
        return timer


class TestAutocompleteTyping:
    """Input handling and suggestion state."""

    def setup_method(self):
        from wandernest.storage import DestinationCatalog

        self.index = FuzzyIndex(DestinationCatalog.bundled())
        self.controller = AutocompleteController(self.index)

    def test_starts_idle(self):
        """Test the initial idle state."""
        state = self.controller.state
        assert state.status == AutocompleteStatus.IDLE
        assert state.suggestions == ()
        assert state.highlighted_index == -1
        assert not state.visible

    def test_short_query_stays_idle(self):
        """Test that a one-character query does not open suggestions."""
        self.controller.set_query("t")
        assert self.controller.state.status == AutocompleteStatus.IDLE
        assert not self.controller.state.visible

    def test_suggestions_shown(self):
        """Test that a matching query shows ranked suggestions."""
        self.controller.set_query("toky")
        state = self.controller.state
        assert state.status == AutocompleteStatus.SHOWING_SUGGESTIONS
        assert state.visible
        assert state.suggestions[0].name == "Tokyo"
        assert len(state.suggestions) <= 8

    def test_no_results(self):
        """Test the no-results state for an unmatched query."""
        self.controller.set_query("qqqqqqqq")
        state = self.controller.state
        assert state.status == AutocompleteStatus.NO_RESULTS
        assert state.show_no_results

    def test_shortening_query_clears_suggestions(self):
        """Test that shortening below two characters clears suggestions."""
        self.controller.set_query("toky")
        self.controller.set_query("t")
        assert self.controller.state.suggestions == ()
        assert self.controller.state.status == AutocompleteStatus.IDLE

    def test_clear(self):
        """Test that clear empties the query and hides the list."""
        self.controller.set_query("kyoto")
        self.controller.clear()
        state = self.controller.state
        assert state.query == ""
        assert not state.visible

    def test_escape_then_focus_reopens(self):
        """Test that Escape hides suggestions and focus brings them back."""
        self.controller.set_query("kyoto")
        suggestions = self.controller.state.suggestions
        assert self.controller.key_down(Key.ESCAPE)
        assert not self.controller.state.visible
        assert self.controller.state.query == "kyoto"

        self.controller.focus()
        assert self.controller.state.visible
        assert self.controller.state.suggestions == suggestions

    def test_click_outside_closes(self):
        """Test that clicking outside closes the list."""
        self.controller.set_query("kyoto")
        self.controller.click_outside()
        assert not self.controller.state.visible
        assert self.controller.state.status == AutocompleteStatus.IDLE

    def test_focus_with_short_query_does_nothing(self):
        """Test that focusing with a short query keeps the list closed."""
        self.controller.set_query("k")
        self.controller.focus()
        assert not self.controller.state.visible

    def test_change_events(self):
        """Test the sequence of published states while typing."""
        states = []
        self.controller.subscribe(AutocompleteEvent.CHANGE, states.append)
        self.controller.set_query("kyoto")
        assert [s.status for s in states] == [
            AutocompleteStatus.TYPING,
            AutocompleteStatus.SHOWING_SUGGESTIONS,
        ]

    def test_limit(self):
        """Test that the suggestion count respects the limit."""
        controller = AutocompleteController(self.index, limit=2)
        controller.set_query("an")
        assert len(controller.state.suggestions) <= 2


class TestAutocompleteDebounce:
    """Debounced searches never let stale results win."""

    def setup_method(self):
        from wandernest.storage import DestinationCatalog

        self.index = FuzzyIndex(DestinationCatalog.bundled())
        self.scheduler = FakeScheduler()
        self.controller = AutocompleteController(
            self.index, debounce=0.15, scheduler=self.scheduler
        )

    def test_requires_scheduler(self):
        """Test that debouncing without a scheduler is rejected."""
        with pytest.raises(ValueError):
            AutocompleteController(self.index, debounce=0.15)

    def test_typing_state_until_timer_fires(self):
        """Test that the state stays TYPING until the debounce timer fires."""
        self.controller.set_query("kyoto")
        assert self.controller.state.status == AutocompleteStatus.TYPING
        assert self.controller.state.suggestions == ()

        self.scheduler.timers[-1].fire()
        assert self.controller.state.status == AutocompleteStatus.SHOWING_SUGGESTIONS

    def test_rapid_typing_keeps_latest_results(self):
        """Test that only the latest query's results are shown."""
        for text in ["to", "tok", "toky"]:
            self.controller.set_query(text)

        first, second, last = self.scheduler.timers
        assert first.cancelled and second.cancelled
        assert not last.cancelled

        last.fire()
        # Late deliveries of superseded searches are ignored.
        first.fire()
        second.fire()

        state = self.controller.state
        assert state.query == "toky"
        assert state.suggestions[0].name == "Tokyo"
        assert list(state.suggestions) == self.index.search_records("toky", limit=8)

    def test_stale_result_after_clear_is_dropped(self):
        """Test that a search finishing after clear is discarded."""
        self.controller.set_query("kyoto")
        timer = self.scheduler.timers[-1]
        self.controller.clear()
        timer.fire()
        assert self.controller.state.suggestions == ()
        assert not self.controller.state.visible

    def test_flush_runs_pending_search(self):
        """Test that flush runs the pending search immediately."""
        self.controller.set_query("kyoto")
        self.controller.flush()
        assert self.controller.state.suggestions[0].name == "Kyoto"
        assert self.scheduler.timers[-1].cancelled


class TestAutocompleteKeyboard:
    """Keyboard navigation over five suggestions."""

    @pytest.fixture(autouse=True)
    def setup_controller(self, make_record):
        self.records = [
            make_record(name=name)
            for name in ["Santa Cruz", "Santa Fe", "Santa Monica", "Santa Rosa", "Santa Clara"]
        ]
        self.selected = []
        self.searches = []
        self.controller = AutocompleteController(
            FuzzyIndex(self.records),
            on_select=self.selected.append,
            on_search=self.searches.append,
        )
        self.controller.set_query("santa")
        assert len(self.controller.state.suggestions) == 5

    def test_arrow_down_three_times_then_enter(self):
        """Test selecting the third suggestion from the keyboard."""
        for _ in range(3):
            self.controller.key_down(Key.ARROW_DOWN)
        expected = self.controller.state.suggestions[2]
        assert self.controller.state.highlighted_index == 2

        self.controller.key_down(Key.ENTER)
        assert self.selected == [expected]
        assert self.controller.state.query == expected.name
        assert self.controller.state.selected == expected
        assert not self.controller.state.visible

    def test_arrow_up_at_start_stays(self):
        """Test that ArrowUp with nothing highlighted stays at -1."""
        self.controller.key_down("ArrowUp")
        assert self.controller.state.highlighted_index == -1

    def test_arrow_down_clamps_at_last(self):
        """Test that ArrowDown stops at the last suggestion."""
        for _ in range(10):
            self.controller.key_down(Key.ARROW_DOWN)
        assert self.controller.state.highlighted_index == 4

    def test_enter_without_highlight_submits(self):
        """Test that Enter without a highlight submits the query."""
        self.controller.key_down(Key.ENTER)
        assert self.searches == ["santa"]
        assert self.selected == []
        assert not self.controller.state.visible

    def test_click_suggestion(self):
        """Test selecting a suggestion by click."""
        self.controller.click_suggestion(1)
        assert self.selected == [self.controller.state.selected]
        assert self.controller.state.selected.name == self.controller.state.query

    def test_click_out_of_range_ignored(self):
        """Test that clicking a missing suggestion is ignored."""
        self.controller.click_suggestion(9)
        assert self.selected == []

    def test_unknown_key_not_handled(self):
        """Test that unrelated keys are not handled."""
        assert not self.controller.key_down("Tab")

    def test_typing_after_selection_clears_it(self):
        """Test that editing the query drops the selection."""
        self.controller.click_suggestion(0)
        self.controller.set_query("sant")
        assert self.controller.state.selected is None


class TestAutocompleteNavigation:
    """Default outcomes navigate to detail and search views."""

    @pytest.fixture(autouse=True)
    def setup_controller(self, make_record):
        self.record = make_record(id=42, name="Lisbon")
        self.paths = []
        self.controller = AutocompleteController(FuzzyIndex([self.record]), navigate=self.paths.append)

    def test_commit_navigates_to_detail(self):
        """Test that committing a suggestion opens its detail path."""
        self.controller.set_query("lisb")
        self.controller.key_down(Key.ARROW_DOWN)
        self.controller.key_down(Key.ENTER)
        assert self.paths == ["/destinations/42"]

    def test_submit_navigates_to_search(self):
        """Test that submitting opens the search results path."""
        self.controller.set_query("new york")
        self.controller.submit()
        assert self.paths == ["/search?q=new%20york"]

    def test_blank_submit_ignored(self):
        """Test that submitting a blank query does nothing."""
        self.controller.set_query("   ")
        self.controller.key_down(Key.ENTER)
        assert self.paths == []

    def test_events_emitted(self):
        """Test that commit publishes a SELECT event."""
        selected = []
        self.controller.subscribe(AutocompleteEvent.SELECT, selected.append)
        self.controller.commit(self.record)
        assert selected == [self.record]
