"""
Materiality matrix positioning.

Maps scored topics onto a square plot: financial impact on the x-axis,
impact on stakeholders on the y-axis (inverted so higher impact plots
higher), marker size by stakeholder concern, fill by ESG category and
stroke by materiality band.
"""

from dataclasses import dataclass

from materiality.esrs_topics import CATEGORIES, topic_label
from materiality.scoring import (
    HIGHLY_MATERIAL_THRESHOLD,
    MATERIAL_THRESHOLD,
    MAX_SCORE,
    classify,
    is_highly_material,
    is_material,
)

CATEGORY_FILTERS = ("all",) + CATEGORIES

CONCERN_MARKER_RADIUS = {"high": 16, "medium": 12, "low": 8}
DEFAULT_MARKER_RADIUS = 10

CATEGORY_COLORS = {
    "environmental": "#10b981",  # green
    "social": "#3b82f6",  # blue
    "governance": "#8b5cf6",  # purple
}
DEFAULT_COLOR = "#6b7280"  # gray

# Stroke colour by lower bound of materiality band, highest first
_BAND_STROKES = [
    (4.0, "#ef4444"),  # red
    (3.0, "#f97316"),  # orange
    (2.0, "#eab308"),  # yellow
]

THRESHOLD_LINE_COLOR = "#ef4444"
GRID_LINE_COLOR = "#e5e7eb"


@dataclass(frozen=True)
class MatrixConfig:
    size: int = 400
    padding: int = 40

    @property
    def chart_size(self):
        return self.size - 2 * self.padding

    @classmethod
    def from_app_config(cls, config):
        return cls(
            size=config.get("MATRIX_SIZE", cls.size),
            padding=config.get("MATRIX_PADDING", cls.padding),
        )


def position(financial, impact, config=MatrixConfig()):
    """Return the (x, y) plot coordinate for a pair of 0-5 scores."""
    chart = config.chart_size
    x = (financial / MAX_SCORE) * chart + config.padding
    y = chart - (impact / MAX_SCORE) * chart + config.padding
    return x, y


def marker_radius(concern_level):
    return CONCERN_MARKER_RADIUS.get(concern_level, DEFAULT_MARKER_RADIUS)


def category_color(category):
    return CATEGORY_COLORS.get(category, DEFAULT_COLOR)


def stroke_style(index):
    """Stroke colour and width emphasising material topics."""
    color = DEFAULT_COLOR
    for lower, band_color in _BAND_STROKES:
        if index >= lower:
            color = band_color
            break
    width = 3 if is_material(index) else 1
    return color, width


def threshold_lines(config=MatrixConfig()):
    """Dashed guide lines at the materiality cutoff on both axes."""
    x, _ = position(MATERIAL_THRESHOLD, 0, config)
    _, y = position(0, MATERIAL_THRESHOLD, config)
    low = config.padding
    high = config.padding + config.chart_size
    return [
        {"axis": "financial", "value": MATERIAL_THRESHOLD,
         "x1": x, "y1": low, "x2": x, "y2": high, "color": THRESHOLD_LINE_COLOR},
        {"axis": "impact", "value": MATERIAL_THRESHOLD,
         "x1": low, "y1": y, "x2": high, "y2": y, "color": THRESHOLD_LINE_COLOR},
    ]


def grid_lines(config=MatrixConfig()):
    """Vertical and horizontal lines at each whole score 0-5."""
    low = config.padding
    high = config.padding + config.chart_size
    lines = []
    for score in range(MAX_SCORE + 1):
        x, _ = position(score, 0, config)
        _, y = position(0, score, config)
        lines.append({"axis": "financial", "value": score, "x1": x, "y1": low, "x2": x, "y2": high, "color": GRID_LINE_COLOR})
        lines.append({"axis": "impact", "value": score, "x1": low, "y1": y, "x2": high, "y2": y, "color": GRID_LINE_COLOR})
    return lines


def plottable(topics):
    """Topics with a computed materiality index; the rest are never plotted."""
    return [
        t for t in topics
        if t.has_index
        and t.financial_impact_score is not None
        and t.impact_on_stakeholders is not None
    ]


def filter_by_category(topics, category="all"):
    if category not in CATEGORY_FILTERS:
        raise ValueError(f"Unknown category filter: {category}")
    if category == "all":
        return list(topics)
    return [t for t in topics if t.category == category]


def plot_point(topic, config=MatrixConfig()):
    index = float(topic.materiality_index)
    x, y = position(topic.financial_impact_score, topic.impact_on_stakeholders, config)
    stroke, stroke_width = stroke_style(index)
    return {
        "id": topic.id,
        "topic": topic.topic,
        "label": topic_label(topic.topic),
        "category": topic.category,
        "x": x,
        "y": y,
        "radius": marker_radius(topic.stakeholder_concern_level),
        "fill": category_color(topic.category),
        "stroke": stroke,
        "strokeWidth": stroke_width,
        "materialityIndex": index,
        "level": classify(index),
    }


def summarize(topics):
    indexes = [float(t.materiality_index) for t in topics]
    return {
        "total": len(indexes),
        "material": sum(1 for i in indexes if is_material(i)),
        "highlyMaterial": sum(1 for i in indexes if is_highly_material(i)),
    }


def plot_matrix(topics, category="all", config=MatrixConfig()):
    """
    Build the full matrix view for a topic list.

    Unscored topics are dropped first, then the category filter is applied;
    the summary counts cover the filtered set only.
    """
    scored = plottable(topics)
    filtered = filter_by_category(scored, category)
    return {
        "category": category,
        "size": config.size,
        "padding": config.padding,
        "chartSize": config.chart_size,
        "points": [plot_point(t, config) for t in filtered],
        "summary": summarize(filtered),
        "scoredCount": len(scored),
        "thresholds": {
            "material": MATERIAL_THRESHOLD,
            "highlyMaterial": HIGHLY_MATERIAL_THRESHOLD,
        },
        "thresholdLines": threshold_lines(config),
        "gridLines": grid_lines(config),
    }
