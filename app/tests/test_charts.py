"""
Tests for the analytics chart generation.
"""

import plotly.graph_objects as go

from app.charts import (
    MAX_BARS,
    create_count_bar_chart,
    create_medium_pie_chart,
    create_monthly_chart,
    create_rating_chart,
)


def test_create_count_bar_chart_largest_on_top():
    """Test counts are drawn as horizontal bars with the largest at the top."""
    fig = create_count_bar_chart({"Drama": 3, "Action": 5, "Comedy": 1}, "Top Genres")

    assert isinstance(fig, go.Figure)
    assert len(fig.data) == 1
    bar = fig.data[0]
    assert isinstance(bar, go.Bar)
    assert bar.orientation == "h"
    assert list(bar.y) == ["Comedy", "Drama", "Action"]
    assert list(bar.x) == [1, 3, 5]
    assert fig.layout.title.text == "Top Genres"


def test_create_count_bar_chart_limits_bars():
    """Test only the largest values are shown."""
    counts = {f"Genre {i}": i for i in range(MAX_BARS + 5)}
    fig = create_count_bar_chart(counts, "Top Genres")
    assert len(fig.data[0].y) == MAX_BARS


def test_empty_charts_have_no_traces():
    """Test charts without data show a placeholder instead of traces."""
    for fig in (
        create_count_bar_chart({}, "Languages"),
        create_medium_pie_chart({}),
        create_monthly_chart([]),
        create_rating_chart([]),
    ):
        assert len(fig.data) == 0
        assert fig.layout.annotations[0].text == "No data"


def test_create_medium_pie_chart():
    """Test the pie chart uses a color per medium."""
    fig = create_medium_pie_chart({"Movie": 2, "Podcast": 1, "Radio": 1})

    pie = fig.data[0]
    assert isinstance(pie, go.Pie)
    assert list(pie.values) == [2, 1, 1]
    assert list(pie.marker.colors) == ["#FF5733", "#F1C40F", "#AAAAAA"]


def test_create_monthly_chart():
    """Test months are plotted in order as categories."""
    fig = create_monthly_chart(
        [{"month": "2024-01", "count": 2}, {"month": "2024-03", "count": 1}]
    )
    assert list(fig.data[0].x) == ["2024-01", "2024-03"]
    assert list(fig.data[0].y) == [2, 1]
    assert fig.layout.xaxis.type == "category"


def test_create_rating_chart():
    """Test the rating distribution chart covers the whole scale."""
    fig = create_rating_chart([{"rating": 8, "count": 3}])
    assert list(fig.data[0].x) == [8]
    assert tuple(fig.layout.xaxis.range) == (-0.5, 10.5)
