import pytest

from conftest import make_topic, scored_topic
from materiality.matrix import (
    MatrixConfig,
    category_color,
    marker_radius,
    plot_matrix,
    position,
    stroke_style,
    threshold_lines,
)


def test_position_maps_scores_onto_padded_square() -> None:
    assert position(0, 0) == (40, 360)
    assert position(5, 5) == (360, 40)
    assert position(3, 3) == pytest.approx((232, 168))


def test_position_uses_configured_plot_area() -> None:
    config = MatrixConfig(size=600, padding=50)
    assert config.chart_size == 500
    assert position(5, 0, config) == (550, 550)
    assert position(0, 5, config) == (50, 50)


def test_marker_radius_by_concern_level() -> None:
    assert marker_radius("high") == 16
    assert marker_radius("medium") == 12
    assert marker_radius("low") == 8
    assert marker_radius(None) == 10


def test_marker_colours() -> None:
    assert category_color("environmental") == "#10b981"
    assert category_color("social") == "#3b82f6"
    assert category_color("governance") == "#8b5cf6"
    assert category_color("other") == "#6b7280"

    assert stroke_style(4.2) == ("#ef4444", 3)
    assert stroke_style(3.0) == ("#f97316", 3)
    assert stroke_style(2.4) == ("#eab308", 1)
    assert stroke_style(1.0) == ("#6b7280", 1)


def test_threshold_lines_sit_at_materiality_cutoff() -> None:
    financial_line, impact_line = threshold_lines()
    assert financial_line["x1"] == financial_line["x2"] == pytest.approx(232)
    assert impact_line["y1"] == impact_line["y2"] == pytest.approx(168)


def test_unscored_topics_are_never_plotted() -> None:
    topics = [
        scored_topic(1, 4, 3, "high"),
        make_topic(2),
        make_topic(3, financial_impact_score=4, impact_on_stakeholders=2),
    ]

    plot = plot_matrix(topics)

    assert [p["id"] for p in plot["points"]] == [1]
    assert plot["scoredCount"] == 1


def test_category_filter_applies_before_summary() -> None:
    topics = [
        scored_topic(1, 5, 5, "high", category="environmental"),
        scored_topic(2, 4, 3, "high", category="social"),
        scored_topic(3, 1, 1, "low", category="social"),
        scored_topic(4, 3, 3, "medium", category="governance"),
    ]

    everything = plot_matrix(topics)
    assert everything["summary"] == {"total": 4, "material": 3, "highlyMaterial": 1}

    social = plot_matrix(topics, category="social")
    assert [p["id"] for p in social["points"]] == [2, 3]
    assert social["summary"] == {"total": 2, "material": 1, "highlyMaterial": 0}


def test_plot_point_styles_marker() -> None:
    plot = plot_matrix([scored_topic(7, 4, 3, "high", topic="ghg-emissions", category="environmental")])
    (point,) = plot["points"]

    assert point["label"] == "GHG Emissions"
    assert point["radius"] == 16
    assert point["fill"] == "#10b981"
    assert point["strokeWidth"] == 3
    assert point["level"] == "Material"
    assert (point["x"], point["y"]) == pytest.approx((296, 168))


def test_unknown_category_filter_is_rejected() -> None:
    with pytest.raises(ValueError):
        plot_matrix([], category="economic")
