"""
Materiality topic records.

A Topic mirrors one row of the topic repository. Its scoring progress is
exposed through `Topic.state`, one of:

- Unscored: at least one of financial score, stakeholder impact or concern
  level is missing, so no materiality index exists yet
- Scored: all three inputs are present together with the computed index
- Reported: a scored topic whose "why material" and "management response"
  narratives are both filled in
"""

from dataclasses import dataclass, field, fields
from datetime import datetime

CONCERN_LEVELS = ("low", "medium", "high")

# Python attribute -> JSON key
_JSON_KEYS = {
    "id": "id",
    "organization_id": "organizationId",
    "topic": "topic",
    "category": "category",
    "subcategory": "subcategory",
    "is_custom": "isCustom",
    "financial_impact_score": "financialImpactScore",
    "impact_on_stakeholders": "impactOnStakeholders",
    "stakeholder_concern_level": "stakeholderConcernLevel",
    "scoring_justification": "scoringJustification",
    "materiality_index": "materialityIndex",
    "is_material": "isMaterial",
    "why_material": "whyMaterial",
    "management_response": "managementResponse",
    "impacted_stakeholders": "impactedStakeholders",
    "business_risk_or_opportunity": "businessRiskOrOpportunity",
    "linked_standards": "linkedStandards",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
}

SCORE_FIELDS = (
    "financial_impact_score",
    "impact_on_stakeholders",
    "stakeholder_concern_level",
    "scoring_justification",
    "materiality_index",
    "is_material",
)
REPORT_FIELDS = (
    "why_material",
    "management_response",
    "impacted_stakeholders",
    "business_risk_or_opportunity",
    "linked_standards",
)
UPDATABLE_FIELDS = SCORE_FIELDS + REPORT_FIELDS


@dataclass(frozen=True)
class Unscored:
    name = "unscored"


@dataclass(frozen=True)
class Scored:
    financial: int
    impact: int
    concern: str
    index: float
    name = "scored"


@dataclass(frozen=True)
class Reported:
    scored: Scored
    why_material: str
    management_response: str
    name = "reported"


@dataclass
class Topic:
    id: int
    organization_id: int
    topic: str
    category: str
    subcategory: str = None
    is_custom: bool = False
    financial_impact_score: int = None
    impact_on_stakeholders: int = None
    stakeholder_concern_level: str = None
    scoring_justification: str = None
    materiality_index: float = None
    is_material: bool = None
    why_material: str = None
    management_response: str = None
    impacted_stakeholders: list = field(default_factory=list)
    business_risk_or_opportunity: str = None
    linked_standards: list = field(default_factory=list)
    created_at: datetime = None
    updated_at: datetime = None

    @property
    def is_scored(self):
        return self.financial_impact_score is not None

    @property
    def has_index(self):
        return self.materiality_index is not None

    @property
    def report_complete(self):
        return bool(self.why_material) and bool(self.management_response)

    @property
    def state(self):
        if (
            self.financial_impact_score is None
            or self.impact_on_stakeholders is None
            or self.stakeholder_concern_level not in CONCERN_LEVELS
            or self.materiality_index is None
        ):
            return Unscored()
        scored = Scored(
            financial=self.financial_impact_score,
            impact=self.impact_on_stakeholders,
            concern=self.stakeholder_concern_level,
            index=self.materiality_index,
        )
        if self.report_complete:
            return Reported(scored, self.why_material, self.management_response)
        return scored

    def apply(self, updates):
        """Return a copy with the given attribute updates applied."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        for key, value in updates.items():
            if key not in values:
                raise KeyError(f"Unknown topic field: {key}")
            values[key] = value
        return Topic(**values)

    def to_dict(self):
        data = {}
        for attr, key in _JSON_KEYS.items():
            value = getattr(self, attr)
            if isinstance(value, datetime):
                value = value.isoformat()
            data[key] = value
        data["state"] = self.state.name
        return data
