"""
Streamlit application to track and analyze watched and read media.
"""

import functools
import logging
from typing import Dict, List, Optional, Sequence

import streamlit as st

from app.charts import (
    create_count_bar_chart,
    create_medium_pie_chart,
    create_monthly_chart,
    create_rating_chart,
)
from app.state import UIState
from app.utils import COLUMN_LABELS, entries_to_rows, format_cell
from catalog.analytics import compute_metrics
from catalog.batch import fetch_metadata_for_entries
from catalog.config import load_settings
from catalog.entries import (
    create_entry,
    delete_entry,
    get_entries,
    get_status_history,
    update_entry,
)
from catalog.errors import CatalogError
from catalog.filters import (
    LIST_DIMENSIONS,
    FilterState,
    apply_filters,
    extract_filter_options,
    search_entries,
)
from catalog.languages import normalize_genre, normalize_language
from catalog.media_apis import fetch_metadata
from catalog.metadata_merge import (
    Decision,
    FieldDecision,
    apply_metadata,
    build_override_decisions,
    has_existing_data,
)
from catalog.models import MEDIUM_OPTIONS, PLATFORM_OPTIONS, STATUS_OPTIONS, TYPE_OPTIONS
from catalog.parsing import get_date
from catalog.store import JsonStore
from catalog.uploads import save_cover_image

logger = logging.getLogger(__name__)

NEW_ENTRY = "new"
PAGES = ("Catalog", "Analytics")


@st.cache_data
def get_settings() -> Dict:
    """Load the catalog settings once per session."""
    return load_settings()


def load_entries(store: JsonStore) -> List[Dict]:
    """
    Load every entry from the store.

    Returns:
        List of entry dictionaries, or an empty list if the store can't be read
    """
    try:
        return get_entries(store)
    except CatalogError as e:
        st.error(f"Could not load entries: {e}")
        logger.error("Failed to load entries: %s", e)
        return []


def _sync_query_params(state: UIState) -> None:
    st.query_params.clear()
    st.query_params.update(state.to_params())


def get_ui_state() -> UIState:
    """Get the table view state, restoring it from the URL on first use."""
    if "ui_state" not in st.session_state:
        state = UIState.from_params(st.query_params.to_dict())
        state.subscribe(_sync_query_params)
        st.session_state["ui_state"] = state
    return st.session_state["ui_state"]


def _with_current(options: Sequence[str], current: Optional[str]) -> List[Optional[str]]:
    """Selectbox options with an empty choice, plus the current value if it's not listed."""
    choices = [None, *options]
    if current and current not in choices:
        choices.append(current)
    return choices


def _format_choice(value: Optional[str]) -> str:
    return value or "(none)"


def render_filter_sidebar(state: UIState, entries: List[Dict]) -> None:
    """Render the filter controls and update the state with the selection."""
    options = extract_filter_options(entries)
    st.sidebar.header("Filters")

    selected = {}
    for dimension in LIST_DIMENSIONS:
        current = getattr(state.filters, dimension)
        choices = sorted(set(options[dimension]) | set(current))
        selected[dimension] = st.sidebar.multiselect(
            dimension.capitalize(), choices, default=current
        )

    date_from = st.sidebar.date_input("From", value=get_date(state.filters.date_from))
    date_to = st.sidebar.date_input("To", value=get_date(state.filters.date_to))

    if st.sidebar.button("Clear filters"):
        state.clear_filters()
        st.rerun()

    state.set_filters(
        FilterState(
            date_from=date_from.isoformat() if date_from else None,
            date_to=date_to.isoformat() if date_to else None,
            **selected,
        )
    )


def run_batch_fetch(store: JsonStore, settings: Dict, entries: List[Dict]):
    """
    Fetch metadata for the given entries, showing progress and a summary.

    Returns:
        BatchSummary of the run
    """
    progress = st.progress(0.0, text="Fetching metadata...")

    def _on_progress(completed: int, total: int) -> None:
        progress.progress(completed / total, text=f"Fetched {completed} of {total}")

    fetcher = functools.partial(
        fetch_metadata,
        source=settings["default_source"],
        timeout=settings["request_timeout"],
    )
    summary = fetch_metadata_for_entries(
        store,
        entries,
        fetcher=fetcher,
        delay_seconds=settings["batch_delay_seconds"],
        on_progress=_on_progress,
    )
    progress.empty()

    if summary.failed and not summary.updated:
        st.error(summary.message())
    else:
        st.toast(summary.message())
    return summary


def _start_draft(entry: Optional[Dict]) -> None:
    st.session_state["draft"] = dict(entry) if entry else {}
    st.session_state["draft_version"] = st.session_state.get("draft_version", 0) + 1
    st.session_state.pop("pending_metadata", None)
    st.session_state.pop("pending_decisions", None)


def fetch_into_draft(draft: Dict, settings: Dict) -> None:
    """
    Fetch metadata for the draft entry.

    When the draft already holds data the fetched values wait in the session for the
    user to choose field by field.  Otherwise they are applied straight away.
    """
    try:
        fetched = fetch_metadata(
            title=draft.get("title"),
            imdb_id=draft.get("imdb_id"),
            medium=draft.get("medium"),
            season=draft.get("season"),
            source=settings["default_source"],
            timeout=settings["request_timeout"],
        )
    except CatalogError as e:
        st.error(str(e))
        return

    if has_existing_data(draft):
        st.session_state["pending_metadata"] = fetched
        st.session_state["pending_decisions"] = build_override_decisions(draft, fetched)
        return

    _start_draft(apply_metadata(draft, fetched))
    st.toast("Metadata applied")


def render_override_confirmation(draft: Dict) -> None:
    """Let the user choose, field by field, whether fetched values replace the draft's."""
    fetched = st.session_state["pending_metadata"]
    decisions: List[FieldDecision] = st.session_state["pending_decisions"]

    st.subheader("Apply fetched metadata")
    chosen = []
    for decision in decisions:
        current = format_cell(decision.field, decision.current_value) or "(empty)"
        new = format_cell(decision.field, decision.fetched_value)
        use_fetched = st.checkbox(
            f"{COLUMN_LABELS.get(decision.field, decision.field)}: {current} -> {new}",
            value=decision.decision == Decision.OVERWRITE,
            key=f"override_{decision.field}",
        )
        chosen.append(
            decision.model_copy(
                update={
                    "decision": Decision.OVERWRITE if use_fetched else Decision.KEEP
                }
            )
        )

    apply_col, cancel_col = st.columns(2)
    if apply_col.button("Apply selected"):
        _start_draft(apply_metadata(draft, fetched, chosen))
        st.rerun()
    if cancel_col.button("Cancel"):
        st.session_state.pop("pending_metadata", None)
        st.session_state.pop("pending_decisions", None)
        st.rerun()


def render_entry_fields(draft: Dict, version: int) -> Dict:
    """
    Render the inputs for one entry.

    Returns:
        The values currently entered
    """

    def key(field: str) -> str:
        return f"{field}_{version}"

    def choice(label: str, field: str, options: Sequence[str]) -> Optional[str]:
        choices = _with_current(options, draft.get(field))
        return st.selectbox(
            label,
            choices,
            index=choices.index(draft.get(field)) if draft.get(field) else 0,
            format_func=_format_choice,
            key=key(field),
        )

    values = {}
    values["title"] = st.text_input("Title", value=draft.get("title") or "", key=key("title"))
    left, right = st.columns(2)
    with left:
        values["medium"] = choice("Medium", "medium", MEDIUM_OPTIONS)
        values["status"] = choice("Status", "status", STATUS_OPTIONS)
        values["type"] = choice("Type", "type", TYPE_OPTIONS)
        values["platform"] = choice("Platform", "platform", PLATFORM_OPTIONS)
        values["genre"] = normalize_genre(
            st.text_input(
                "Genre", value=", ".join(draft.get("genre") or []), key=key("genre")
            )
        )
        values["language"] = normalize_language(
            st.text_input(
                "Language",
                value=", ".join(draft.get("language") or []),
                key=key("language"),
            )
        )
        values["season"] = st.text_input("Season", value=draft.get("season") or "", key=key("season"))
        values["length"] = st.text_input("Length", value=draft.get("length") or "", key=key("length"))
        values["imdb_id"] = st.text_input(
            "IMDb ID / ISBN", value=draft.get("imdb_id") or "", key=key("imdb_id")
        )
    with right:
        values["episodes"] = st.number_input(
            "Episodes", min_value=0, value=draft.get("episodes"), step=1, key=key("episodes")
        )
        values["episodes_watched"] = st.number_input(
            "Episodes watched",
            min_value=0,
            value=draft.get("episodes_watched"),
            step=1,
            key=key("episodes_watched"),
        )
        for field, label in (
            ("rating", "Rating"),
            ("my_rating", "My rating"),
            ("average_rating", "Average rating"),
        ):
            values[field] = st.number_input(
                label,
                min_value=0.0,
                max_value=10.0,
                value=draft.get(field),
                step=0.1,
                key=key(field),
            )
        values["price"] = st.number_input(
            "Price", min_value=0.0, value=draft.get("price"), step=0.01, key=key("price")
        )
        start_date = st.date_input(
            "Start date", value=get_date(draft.get("start_date")), key=key("start_date")
        )
        finish_date = st.date_input(
            "Finish date", value=get_date(draft.get("finish_date")), key=key("finish_date")
        )
        values["start_date"] = start_date.isoformat() if start_date else None
        values["finish_date"] = finish_date.isoformat() if finish_date else None
        values["poster_url"] = st.text_input(
            "Poster URL", value=draft.get("poster_url") or "", key=key("poster_url")
        )

    return values


def save_draft(store: JsonStore, draft: Dict) -> Optional[Dict]:
    """
    Create or update the entry held in the draft.

    Returns:
        The stored entry, or None if it was rejected
    """
    try:
        if draft.get("id"):
            # time_taken is derived again from the dates
            changes = {key: value for key, value in draft.items() if key != "time_taken"}
            saved = update_entry(store, draft["id"], changes)
        else:
            saved = create_entry(store, draft)
    except CatalogError as e:
        st.error(str(e))
        return None
    st.toast(f"Saved '{saved['title']}'")
    return saved


def render_entry_editor(store: JsonStore, settings: Dict, entries: List[Dict]) -> None:
    """Render the add/edit form with metadata fetch, cover upload and delete."""
    st.header("Add or edit an entry")
    labels = {NEW_ENTRY: "New entry"}
    labels.update({entry["id"]: entry["title"] for entry in entries})
    editing_id = st.selectbox("Entry", list(labels), format_func=labels.get)

    if st.session_state.get("editing_id") != editing_id or "draft" not in st.session_state:
        st.session_state["editing_id"] = editing_id
        _start_draft(next((entry for entry in entries if entry["id"] == editing_id), None))

    draft = st.session_state["draft"]
    if "pending_decisions" in st.session_state:
        render_override_confirmation(draft)
        return

    values = render_entry_fields(draft, st.session_state["draft_version"])
    draft = {**draft, **values}

    upload = st.file_uploader("Cover image", type=["jpg", "jpeg", "png", "gif", "webp"])
    if upload is not None and st.button("Use uploaded cover"):
        try:
            draft["poster_url"] = save_cover_image(
                upload.getvalue(), upload.name, settings["upload_dir"], draft.get("title")
            )
        except CatalogError as e:
            st.error(str(e))
        else:
            _start_draft(draft)
            st.rerun()

    fetch_col, save_col, delete_col = st.columns(3)
    if fetch_col.button("Fetch metadata"):
        st.session_state["draft"] = draft
        fetch_into_draft(draft, settings)
        st.rerun()
    if save_col.button("Save"):
        saved = save_draft(store, draft)
        if saved:
            st.session_state["editing_id"] = saved["id"]
            _start_draft(saved)
            st.rerun()
    if draft.get("id") and delete_col.button("Delete"):
        try:
            delete_entry(store, draft["id"])
        except CatalogError as e:
            st.error(str(e))
        else:
            st.toast(f"Deleted '{draft['title']}'")
            st.session_state.pop("editing_id", None)
            st.rerun()

    if draft.get("id"):
        with st.expander("Status history"):
            try:
                history = get_status_history(store, draft["id"])
            except CatalogError as e:
                st.error(str(e))
            else:
                st.dataframe(history, use_container_width=True, hide_index=True)


def render_catalog_page(
    store: JsonStore, settings: Dict, state: UIState, entries: List[Dict]
) -> None:
    """Render the entries table with search, column chooser and batch fetch."""
    st.title("Media Catalog")

    state.set_search(st.text_input("Search", value=state.search))
    state.set_columns(
        st.multiselect(
            "Columns",
            list(COLUMN_LABELS),
            default=state.columns,
            format_func=COLUMN_LABELS.get,
        )
    )

    visible = search_entries(apply_filters(entries, state.filters), state.search)
    st.caption(f"Showing {len(visible)} of {len(entries)} entries")
    st.dataframe(
        entries_to_rows(visible, state.columns),
        use_container_width=True,
        hide_index=True,
    )

    if visible and st.button(f"Fetch missing metadata for {len(visible)} entries"):
        run_batch_fetch(store, settings, visible)
        st.rerun()

    render_entry_editor(store, settings, entries)


def render_analytics_page(state: UIState, entries: List[Dict]) -> None:
    """Render metrics and charts for the filtered entries."""
    st.title("Analytics")
    metrics = compute_metrics(search_entries(apply_filters(entries, state.filters), state.search))

    total_col, hours_col, pages_col, spent_col, rating_col = st.columns(5)
    total_col.metric("Entries", metrics["total_items"])
    hours_col.metric("Hours watched", f"{metrics['total_hours']:.1f}")
    pages_col.metric("Pages read", metrics["total_pages"])
    spent_col.metric("Spent", f"{metrics['total_spent']:.2f}")
    rating_col.metric("Average rating", f"{metrics['average_rating']:.1f}")

    left, right = st.columns(2)
    with left:
        st.plotly_chart(create_medium_pie_chart(metrics["count_by_medium"]), use_container_width=True)
        st.plotly_chart(
            create_count_bar_chart(metrics["count_by_genre"], "Top Genres"),
            use_container_width=True,
        )
        st.plotly_chart(create_rating_chart(metrics["rating_distribution"]), use_container_width=True)
    with right:
        st.plotly_chart(create_monthly_chart(metrics["count_by_month"]), use_container_width=True)
        st.plotly_chart(
            create_count_bar_chart(metrics["count_by_language"], "Languages"),
            use_container_width=True,
        )
        st.plotly_chart(
            create_count_bar_chart(metrics["count_by_platform"], "Platforms"),
            use_container_width=True,
        )


def main():
    """Main Streamlit application."""
    st.set_page_config(page_title="Media Catalog", page_icon=":clapper:", layout="wide")

    settings = get_settings()
    store = JsonStore(settings["store_path"])
    state = get_ui_state()

    page = st.sidebar.radio("Page", PAGES)
    if st.sidebar.button("Reload Data"):
        st.cache_data.clear()
        st.rerun()

    entries = load_entries(store)
    render_filter_sidebar(state, entries)

    if page == "Analytics":
        render_analytics_page(state, entries)
    else:
        render_catalog_page(store, settings, state, entries)


if __name__ == "__main__":
    main()
