"""Tests for the Streamlit front end, driven through streamlit's AppTest harness."""

from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

import wandernest
from wandernest import config

APP_PATH = Path(wandernest.__file__).parent / "app.py"


@pytest.fixture
def app(monkeypatch, tmp_path):
    monkeypatch.setattr(config, "load_dotenv", lambda: None)
    for name in ["ANTHROPIC_API_KEY", "UNSPLASH_ACCESS_KEY", "DEBUG", "WANDERNEST_CATALOG_PATH"]:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("WANDERNEST_DATA_DIR", str(tmp_path))
    at = AppTest.from_file(str(APP_PATH), default_timeout=30)
    at.run()
    assert not at.exception
    return at


class TestDestinationsTab:
    """Browse tab wiring."""

    def test_initial_listing(self, app):
        """Test that the browse tab starts with the whole catalog and no query."""
        listing = app.session_state["listing"]
        assert listing.query == ""
        assert listing.current_page().total_count == 30

    def test_keyword_search_narrows_listing(self, app):
        """Test that typing in the listing search box narrows the listed destinations."""
        app.text_input(key="listing_query").input("japan").run()
        assert not app.exception

        listing = app.session_state["listing"]
        assert listing.query == "japan"
        assert 0 < listing.current_page().total_count < 30
        assert {r.name for r in listing.results} >= {"Tokyo", "Kyoto"}

    def test_clear_resets_keyword(self, app):
        """Test that clearing filters also empties the listing search box."""
        app.text_input(key="listing_query").input("japan").run()
        clear = [b for b in app.button if b.label == "Clear all filters"]
        assert clear
        clear[0].click().run()
        assert not app.exception

        assert app.session_state["listing"].query == ""
        assert app.text_input(key="listing_query").value == ""
        assert app.session_state["listing"].current_page().total_count == 30
