"""
Plotly figures for the analytics page.
"""

import logging
from typing import Dict, List

import plotly.graph_objects as go

logger = logging.getLogger(__name__)

MEDIUM_COLORS = {
    "Movie": "#FF5733",
    "TV Show": "#33A8FF",
    "Book": "#D433FF",
    "Theatre": "#33FF57",
    "Live Theatre": "#2ECC71",
    "Podcast": "#F1C40F",
    "Unknown": "#AAAAAA",
}
MAX_BARS = 15
CHART_HEIGHT = 360


def _apply_theme(fig: go.Figure, title: str) -> go.Figure:
    fig.update_layout(
        title=title,
        height=CHART_HEIGHT,
        plot_bgcolor="rgba(25, 25, 25, 1)",
        paper_bgcolor="rgba(25, 25, 25, 1)",
        font={"color": "white"},
        margin={"l": 40, "r": 10, "t": 50, "b": 40},
        hoverlabel={
            "bgcolor": "rgba(50, 50, 50, 0.9)",
            "font_size": 12,
            "font_family": "Arial",
        },
    )
    return fig


def _empty_chart(title: str) -> go.Figure:
    fig = go.Figure()
    fig.add_annotation(text="No data", showarrow=False, font={"size": 16})
    fig.update_xaxes(visible=False)
    fig.update_yaxes(visible=False)
    return _apply_theme(fig, title)


def create_count_bar_chart(counts: Dict[str, int], title: str) -> go.Figure:
    """
    Create a horizontal bar chart of counts, largest first.

    Only the MAX_BARS largest values are shown.

    Args:
        counts: Value -> count, e.g. count_by_genre from compute_metrics
        title: Chart title

    Returns:
        Plotly Figure object
    """
    if not counts:
        return _empty_chart(title)

    top = sorted(counts.items(), key=lambda item: (-item[1], item[0]))[:MAX_BARS]
    # Reversed so the largest bar is drawn at the top
    labels = [label for label, _ in reversed(top)]
    values = [value for _, value in reversed(top)]
    fig = go.Figure(
        go.Bar(
            x=values,
            y=labels,
            orientation="h",
            marker_color="#33A8FF",
            hovertemplate="%{y}: %{x}<extra></extra>",
        )
    )
    return _apply_theme(fig, title)


def create_medium_pie_chart(count_by_medium: Dict[str, int]) -> go.Figure:
    """
    Create a pie chart of entries per medium.
    """
    title = "Entries by Medium"
    if not count_by_medium:
        return _empty_chart(title)

    labels = list(count_by_medium)
    fig = go.Figure(
        go.Pie(
            labels=labels,
            values=[count_by_medium[label] for label in labels],
            marker={
                "colors": [
                    MEDIUM_COLORS.get(label, MEDIUM_COLORS["Unknown"]) for label in labels
                ]
            },
            hole=0.4,
        )
    )
    return _apply_theme(fig, title)


def create_monthly_chart(count_by_month: List[Dict]) -> go.Figure:
    """
    Create a bar chart of entries per month.

    Args:
        count_by_month: List of {"month": "YYYY-MM", "count": n} sorted by month

    Returns:
        Plotly Figure object
    """
    title = "Entries per Month"
    if not count_by_month:
        return _empty_chart(title)

    fig = go.Figure(
        go.Bar(
            x=[row["month"] for row in count_by_month],
            y=[row["count"] for row in count_by_month],
            marker_color="#FF5733",
            hovertemplate="%{x}: %{y}<extra></extra>",
        )
    )
    fig.update_xaxes(type="category")
    return _apply_theme(fig, title)


def create_rating_chart(rating_distribution: List[Dict]) -> go.Figure:
    """Create a bar chart of how many entries received each whole rating."""
    title = "Rating Distribution"
    if not rating_distribution:
        return _empty_chart(title)

    fig = go.Figure(
        go.Bar(
            x=[row["rating"] for row in rating_distribution],
            y=[row["count"] for row in rating_distribution],
            marker_color="#D433FF",
        )
    )
    fig.update_xaxes(range=[-0.5, 10.5], dtick=1)
    return _apply_theme(fig, title)
