"""
Materiality scoring.

Materiality Index = financial impact x 40% + impact on stakeholders x 40%
                    + stakeholder concern x 20%

Financial impact and stakeholder impact are scored 0-5 on the Likert scale
below. Stakeholder concern is a coarse level converted to a score
(high=5, medium=3, low=1). A topic is material when its index is 3.0 or more.
"""

from materiality.topics import CONCERN_LEVELS

FINANCIAL_WEIGHT = 0.4
IMPACT_WEIGHT = 0.4
CONCERN_WEIGHT = 0.2

MATERIAL_THRESHOLD = 3.0
HIGHLY_MATERIAL_THRESHOLD = 4.0

MIN_SCORE = 0
MAX_SCORE = 5

LIKERT_SCALE = {
    0: "None",
    1: "Low",
    2: "Medium",
    3: "High",
    4: "Very High",
    5: "Critical",
}

STAKEHOLDER_CONCERN_SCORES = {"high": 5, "medium": 3, "low": 1}

# Half-open bands [lower, upper); the top band also includes 5.0
MATERIALITY_LEVELS = [
    (0.0, 2.0, "Not material"),
    (2.0, 3.0, "Low materiality"),
    (3.0, 4.0, "Material"),
    (4.0, 5.0, "Highly material"),
]


class IncompleteScoreError(ValueError):
    """Raised when an index is requested before all three inputs are set."""


def stakeholder_score(level):
    return STAKEHOLDER_CONCERN_SCORES.get(level, 1)


def materiality_index(financial, impact, concern_level):
    """Weighted materiality index rounded to 2 decimals."""
    if financial is None or impact is None or concern_level not in CONCERN_LEVELS:
        raise IncompleteScoreError(
            "Financial score, stakeholder impact and concern level are all required"
        )
    raw = (
        financial * FINANCIAL_WEIGHT
        + impact * IMPACT_WEIGHT
        + stakeholder_score(concern_level) * CONCERN_WEIGHT
    )
    # round(x, 2) on the float sum can land on the wrong side of .xx5
    return round(round(raw, 10), 2)


def classify(index):
    for lower, upper, label in MATERIALITY_LEVELS:
        if lower <= index < upper:
            return label
    if index >= MATERIALITY_LEVELS[-1][0]:
        return MATERIALITY_LEVELS[-1][2]
    return MATERIALITY_LEVELS[0][2]


def is_material(index):
    return index >= MATERIAL_THRESHOLD


def is_highly_material(index):
    return index >= HIGHLY_MATERIAL_THRESHOLD


def can_compute(financial, impact, concern_level):
    """True once every input needed for the index is present."""
    return financial is not None and impact is not None and concern_level in CONCERN_LEVELS


def validate_score(value, label):
    """Coerce a 0-5 score from user input. Returns (score, error)."""
    if value is None or value == "":
        return None, f"{label} is required."
    if isinstance(value, bool):
        return None, f"{label} must be a whole number between {MIN_SCORE} and {MAX_SCORE}."
    try:
        score = int(value)
    except (TypeError, ValueError):
        return None, f"{label} must be a whole number between {MIN_SCORE} and {MAX_SCORE}."
    if isinstance(value, float) and value != score:
        return None, f"{label} must be a whole number between {MIN_SCORE} and {MAX_SCORE}."
    if not MIN_SCORE <= score <= MAX_SCORE:
        return None, f"{label} must be between {MIN_SCORE} and {MAX_SCORE}."
    return score, None


def score_fields(financial, impact, concern_level, justification=None):
    """
    Build the partial update for a scoring save.

    The repository recomputes nothing, so the computed index and material
    flag travel alongside the raw inputs.
    """
    index = materiality_index(financial, impact, concern_level)
    return {
        "financial_impact_score": financial,
        "impact_on_stakeholders": impact,
        "stakeholder_concern_level": concern_level,
        "scoring_justification": justification,
        "materiality_index": index,
        "is_material": is_material(index),
    }
