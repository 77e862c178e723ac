import argparse
import logging

import streamlit as st

from wandernest.agents import ClaudeAgent, Concierge
from wandernest.config import configure_logging, load_settings, save_api_key
from wandernest.engine import SearchEngine
from wandernest.models import DestinationRecord
from wandernest.navigation import parse_path
from wandernest.preferences import PreferenceStore
from wandernest.search import AutocompleteStatus, ListingFilters, SortMode
from wandernest.search.listing import (
    BUDGET_LEVELS,
    CONTINENTS,
    DURATIONS,
    LOCATION_TYPES,
    SEASONS,
    TRAVEL_TYPES,
)
from wandernest.search.results import place_images, resolve_search
from wandernest.services import ImageLoader, UnsplashService
from wandernest.storage import JSONStore

logger = logging.getLogger(__name__)


def parse_args():
    """Parse command-line arguments passed after -- in streamlit run."""
    parser = argparse.ArgumentParser(description="WanderNest")
    parser.add_argument(
        "--local",
        action="store_true",
        help="Run in local mode: load API keys from keyring/environment",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    # Filter out streamlit arguments and parse only our app arguments
    args, _ = parser.parse_known_args()
    return args


APP_ARGS = parse_args()
SETTINGS = load_settings(local_mode=APP_ARGS.local, debug=APP_ARGS.debug or None)
configure_logging(SETTINGS.log_level)

st.set_page_config(
    page_title="WanderNest",
    page_icon="🧭",
    layout="wide",
    initial_sidebar_state="expanded",
)

SUPPORTED_LANGUAGES = [
    "English",
    "Spanish",
    "French",
    "German",
    "Italian",
    "Portuguese",
    "Japanese",
    "Korean",
]

SUPPORTED_CURRENCIES = ["USD", "EUR", "GBP", "JPY", "INR", "AUD"]

SORT_LABELS = {
    SortMode.POPULARITY: "Most Popular",
    SortMode.RATING: "Highest Rated",
    SortMode.PRICE_LOW: "Price: Low to High",
    SortMode.PRICE_HIGH: "Price: High to Low",
    SortMode.NAME: "Name (A-Z)",
}

CARD_COLUMNS = 3


@st.cache_resource
def get_engine() -> SearchEngine:
    return SearchEngine.from_settings(SETTINGS)


@st.cache_resource
def get_image_loader() -> ImageLoader:
    return ImageLoader(UnsplashService(SETTINGS.unsplash_access_key))


def get_agent() -> ClaudeAgent | None:
    """Create the concierge agent when a Claude key is available."""
    if not SETTINGS.anthropic_api_key:
        return None
    try:
        return ClaudeAgent(SETTINGS.anthropic_api_key)
    except Exception as e:
        logger.error("Could not create Claude agent: %s", e)
        return None


def navigate(path: str) -> None:
    """Reflect a navigation path in the page's query parameters."""
    route = parse_path(path)
    st.query_params.clear()
    if route.view == "destination":
        st.query_params["destination"] = str(route.destination_id)
    elif route.view == "search":
        st.query_params["q"] = route.query or ""


def init_session_state():
    """Initialize session state variables."""
    engine = get_engine()
    if "preferences" not in st.session_state:
        st.session_state.preferences = PreferenceStore(store=JSONStore(SETTINGS.data_dir))
    if "autocomplete" not in st.session_state:
        st.session_state.autocomplete = engine.autocomplete(navigate=navigate)
    if "listing" not in st.session_state:
        st.session_state.listing = engine.listing_view()
    if "images" not in st.session_state:
        st.session_state.images = {}
    if "concierge" not in st.session_state:
        agent = get_agent()
        if agent is not None:
            agent.set_destinations(engine.catalog)
            agent.set_language(st.session_state.preferences.language)
        st.session_state.concierge = Concierge(agent)


def load_images(records: list[DestinationRecord]) -> None:
    """Fetch photos for records that have not been looked up yet."""
    missing = [r for r in records if r.id not in st.session_state.images]
    if missing:
        st.session_state.images.update(get_image_loader().load_many(missing))


def on_search_input():
    st.session_state.autocomplete.set_query(st.session_state.search_box)


def render_search_box():
    """Search box with live suggestions."""
    controller = st.session_state.autocomplete
    st.text_input(
        "Search destinations",
        key="search_box",
        placeholder="Search destinations, countries, attractions...",
        on_change=on_search_input,
    )

    state = controller.state
    if state.visible and state.status == AutocompleteStatus.SHOWING_SUGGESTIONS:
        for i, record in enumerate(state.suggestions):
            st.button(
                f"📍 {record.name}, {record.country}",
                key=f"suggestion_{i}_{record.id}",
                on_click=controller.click_suggestion,
                args=(i,),
            )
    elif state.show_no_results:
        st.caption(f'No destinations found for "{state.query}"')
        st.caption("Try searching for a city, country, or region")

    if state.query.strip():
        st.button("Search", key="search_submit", on_click=controller.submit)


def render_sidebar():
    """Render the sidebar with preferences and filters."""
    prefs = st.session_state.preferences
    listing = st.session_state.listing

    with st.sidebar:
        st.title("🧭 WanderNest")

        language = st.selectbox(
            "Language",
            SUPPORTED_LANGUAGES,
            index=SUPPORTED_LANGUAGES.index(prefs.language) if prefs.language in SUPPORTED_LANGUAGES else 0,
        )
        if language != prefs.language:
            prefs.set_language(language)
            if st.session_state.concierge.agent:
                st.session_state.concierge.agent.set_language(language)

        currency = st.selectbox(
            "Currency",
            SUPPORTED_CURRENCIES,
            index=SUPPORTED_CURRENCIES.index(prefs.currency) if prefs.currency in SUPPORTED_CURRENCIES else 0,
        )
        prefs.set_currency(currency)

        st.caption(f"❤️ {prefs.wishlist_count} saved destinations")

        st.divider()
        st.subheader("Filters")

        filters = ListingFilters(
            continent=st.selectbox("Continent", CONTINENTS, index=CONTINENTS.index(listing.filters.continent)),
            travel_type=st.selectbox("Travel type", TRAVEL_TYPES, index=TRAVEL_TYPES.index(listing.filters.travel_type)),
            budget=st.selectbox("Budget", BUDGET_LEVELS, index=BUDGET_LEVELS.index(listing.filters.budget)),
            season=st.selectbox("Season", SEASONS, index=SEASONS.index(listing.filters.season)),
            duration=st.selectbox("Duration", DURATIONS, index=DURATIONS.index(listing.filters.duration)),
            location_type=st.selectbox(
                "Location type", LOCATION_TYPES, index=LOCATION_TYPES.index(listing.filters.location_type)
            ),
        )
        if filters != listing.filters:
            listing.set_filters(filters)

        if listing.has_active_filters():
            st.button("Clear all filters", on_click=clear_listing)

        if SETTINGS.local_mode:
            st.divider()
            with st.expander("API keys"):
                unsplash_key = st.text_input("Unsplash access key", type="password")
                claude_key = st.text_input("Anthropic API key", type="password")
                if st.button("Save keys"):
                    saved = [
                        provider
                        for provider, key in (("Unsplash", unsplash_key), ("Claude", claude_key))
                        if key and save_api_key(provider, key)
                    ]
                    if saved:
                        st.success(f"Saved {', '.join(saved)} key(s). Restart to apply.")


def render_wishlist_button(record: DestinationRecord, key_prefix: str):
    prefs = st.session_state.preferences
    label = "❤️ Saved" if prefs.is_in_wishlist(record.id) else "🤍 Save"
    if st.button(label, key=f"{key_prefix}_wish_{record.id}"):
        prefs.toggle_wishlist(record)
        st.rerun()


def render_card(record: DestinationRecord, key_prefix: str):
    image = st.session_state.images.get(record.id)
    with st.container(border=True):
        if image:
            st.image(image.url, caption=f"Photo by {image.photographer}", use_container_width=True)
        else:
            st.markdown("🏞️")
        title = f"**{record.name}**"
        if record.is_hidden_gem:
            title += " 💎"
        st.markdown(title)
        st.caption(f"{record.country} · {record.continent} · ★ {record.rating}")
        st.write(record.price)
        col1, col2 = st.columns(2)
        with col1:
            if st.button("View", key=f"{key_prefix}_view_{record.id}"):
                st.query_params.clear()
                st.query_params["destination"] = str(record.id)
                st.rerun()
        with col2:
            render_wishlist_button(record, key_prefix)


def render_card_grid(records: list[DestinationRecord], key_prefix: str):
    load_images(records)
    for row_start in range(0, len(records), CARD_COLUMNS):
        cols = st.columns(CARD_COLUMNS)
        for col, record in zip(cols, records[row_start:row_start + CARD_COLUMNS]):
            with col:
                render_card(record, key_prefix)


def on_listing_query():
    st.session_state.listing.set_query(st.session_state.listing_query)


def clear_listing():
    st.session_state.listing.reset()
    st.session_state.listing_query = ""


def render_destinations():
    """Browse view: keyword search, sort selector, card grid and page controls."""
    listing = st.session_state.listing

    st.text_input(
        "Search within destinations",
        key="listing_query",
        placeholder="Keyword, country, attraction...",
        on_change=on_listing_query,
    )

    sort = st.selectbox(
        "Sort by",
        list(SORT_LABELS),
        index=list(SORT_LABELS).index(listing.sort),
        format_func=SORT_LABELS.get,
    )
    if sort != listing.sort:
        listing.set_sort(sort)

    page = listing.current_page()
    if page.total_count == 0:
        st.info("No destinations match these filters.")
        return

    st.caption(f"{page.total_count} destinations")
    render_card_grid(list(page.items), "browse")

    col1, col2, col3 = st.columns([1, 2, 1])
    with col1:
        if st.button("← Previous", disabled=not page.has_previous):
            listing.previous_page()
            st.rerun()
    with col2:
        st.markdown(f"Page {page.page} of {page.total_pages}")
    with col3:
        if st.button("Next →", disabled=not page.has_next):
            listing.next_page()
            st.rerun()


def render_search_results(query: str):
    """Results view for a submitted free-text query."""
    engine = get_engine()
    results = resolve_search(engine.listing_index, query)

    st.header(f'Results for "{results.query}"')
    if st.button("← All destinations", key="results_back"):
        st.query_params.clear()
        st.rerun()

    if not results:
        st.info(f'No destinations found for "{results.query}". Try a city, country, or region.')
        return

    images = place_images(get_image_loader().service, results)
    if images:
        cols = st.columns(min(len(images), 3))
        for col, image in zip(cols, images[:3]):
            with col:
                st.image(image.url, caption=image.alt, use_container_width=True)

    render_card_grid(results.records, "results")


def render_destination(destination_id: int):
    """Detail view for one destination."""
    record = get_engine().catalog.get(destination_id)
    if st.button("← All destinations", key="detail_back"):
        st.query_params.clear()
        st.rerun()

    if record is None:
        st.error("Destination not found.")
        return

    load_images([record])
    image = st.session_state.images.get(record.id)

    st.header(f"{record.name}, {record.country}")
    if image:
        st.image(image.url, caption=f"Photo by {image.photographer}", use_container_width=True)

    col1, col2 = st.columns([2, 1])
    with col1:
        st.write(record.description)
        if record.top_attractions:
            st.subheader("Top attractions")
            for attraction in record.top_attractions:
                st.markdown(f"- {attraction}")
    with col2:
        st.metric("Rating", f"★ {record.rating}")
        st.write(f"**Price:** {record.price}")
        st.write(f"**Budget:** {record.budget_level.value}")
        st.write(f"**Best season:** {record.best_season}")
        st.write(f"**Duration:** {record.duration}")
        st.write(f"**Travel type:** {', '.join(record.travel_type)}")
        if record.is_verified:
            st.caption("✅ Verified destination")
        render_wishlist_button(record, "detail")


def render_chat():
    """Render the concierge chat."""
    concierge = st.session_state.concierge
    st.header("💬 AI Concierge")

    if concierge.agent is None:
        st.warning("⚠️ No Anthropic API key configured. Replies will be limited.")

    prompt = st.chat_input("Ask about destinations, itineraries, budgets...")
    if prompt:
        with st.chat_message("user"):
            st.markdown(prompt)
        with st.chat_message("assistant"):
            st.write_stream(concierge.reply(prompt))
        st.rerun()

    # Newest first
    for msg in reversed(concierge.history):
        with st.chat_message(msg.role):
            st.markdown(msg.content)


def render_wishlist():
    prefs = st.session_state.preferences
    catalog = get_engine().catalog
    records = [r for r in (catalog.get(i) for i in prefs.wishlist) if r is not None]
    if not records:
        st.info("Your wishlist is empty. Save destinations to see them here.")
        return
    render_card_grid(records, "wishlist")


def main():
    """Main application entry point."""
    init_session_state()
    render_sidebar()

    params = st.query_params
    if "destination" in params and params["destination"].isdigit():
        render_destination(int(params["destination"]))
        return

    render_search_box()
    if params.get("q"):
        render_search_results(params["q"])
        return

    tab1, tab2, tab3 = st.tabs(["🗺️ Destinations", "❤️ Wishlist", "💬 Concierge"])

    with tab1:
        render_destinations()

    with tab2:
        render_wishlist()

    with tab3:
        render_chat()


if __name__ == "__main__":
    main()
