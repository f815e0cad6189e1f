"""
Double Materiality Assessment workflow.

Four stages share one live topic list for the active organization:

1. Identification: select catalog topics, add custom topics
2. Scoring: financial impact, stakeholder impact and concern level
3. Matrix: plot scored topics, filter by category
4. Report: narrative for each material topic

Stages are a focus selector only: any stage can be opened at any time and
nothing advances automatically. Each stage carries a completion badge
derived from the topic list.

The active organization is fixed for organization users and chosen from the
client list for consultants. Topic lists are cached per organization id;
switching organization drops the old entry, resets any open editor and
refuses late results fetched for another organization.
"""

import logging
from dataclasses import dataclass, field

from materiality.esrs_topics import RISK_OR_OPPORTUNITY, get_catalog_topic
from materiality.matrix import CATEGORY_FILTERS, MatrixConfig, plot_matrix
from materiality.progress import compute_progress, stage_completion
from materiality.report import build_report
from materiality.scoring import (
    LIKERT_SCALE,
    can_compute,
    classify,
    is_material,
    materiality_index,
    score_fields,
)
from materiality.selection import TopicSelectionManager
from materiality.topics import CONCERN_LEVELS

logger = logging.getLogger(__name__)

STAGES = ("identification", "scoring", "matrix", "report")

STAGE_LABELS = {
    "identification": "Topic Identification",
    "scoring": "Impact & Magnitude Scoring",
    "matrix": "Materiality Matrix",
    "report": "Material Topics Report",
}


class OrganizationAccessError(Exception):
    """The actor may not work on the requested organization."""


class TopicNotFoundError(LookupError):
    """No topic with that id in the active organization."""


@dataclass(frozen=True)
class Actor:
    role: str
    organization_id: int = None
    client_organization_ids: tuple = ()

    @property
    def is_consultant(self):
        return self.role == "consultant"

    def can_access(self, organization_id):
        if self.is_consultant:
            return organization_id in self.client_organization_ids
        return organization_id is not None and organization_id == self.organization_id


class TopicCache:
    """Topic lists keyed by organization id; only the active key accepts writes."""

    def __init__(self):
        self._entries = {}
        self.active_key = None

    def activate(self, key):
        self.active_key = key

    def invalidate(self, key):
        self._entries.pop(key, None)

    def get(self, key):
        return self._entries.get(key)

    def store(self, key, topics):
        if key != self.active_key:
            logger.info(f"Discarded topic list for organization {key}; active is {self.active_key}")
            return False
        self._entries[key] = list(topics)
        return True


@dataclass
class EditState:
    scoring_topic_id: int = None
    report_topic_id: int = None
    custom_topic_text: str = ""
    score_form: dict = field(default_factory=dict)
    report_form: dict = field(default_factory=dict)


class AssessmentWorkflow:
    def __init__(self, repository, actor, matrix_config=None, default_custom_category="governance"):
        self.repository = repository
        self.actor = actor
        self.matrix_config = matrix_config or MatrixConfig()
        self.default_custom_category = default_custom_category
        self.cache = TopicCache()
        self.edit = EditState()
        self.active_stage = STAGES[0]
        self.category_filter = "all"
        self.active_organization_id = None
        if not actor.is_consultant and actor.organization_id is not None:
            self._activate(actor.organization_id)

    # -- organization context -------------------------------------------------

    def set_active_organization(self, organization_id):
        if not self.actor.is_consultant:
            if organization_id != self.actor.organization_id:
                raise OrganizationAccessError("Organization users can only assess their own organization")
            return
        if not self.actor.can_access(organization_id):
            raise OrganizationAccessError("Access denied to this organization")
        if organization_id != self.active_organization_id:
            self._activate(organization_id)

    def _activate(self, organization_id):
        previous = self.active_organization_id
        self.cache.invalidate(previous)
        self.cache.activate(organization_id)
        self.active_organization_id = organization_id
        self.edit = EditState()
        logger.info(f"Active organization changed from {previous} to {organization_id}")
        self.refresh()

    @property
    def is_disabled(self):
        """Consultants have nothing to work on until they pick a client."""
        return self.active_organization_id is None

    def _require_organization(self):
        if self.active_organization_id is None:
            raise OrganizationAccessError("Select a client organization first")
        return self.active_organization_id

    # -- topic list -----------------------------------------------------------

    def refresh(self):
        key = self.active_organization_id
        if key is None:
            return []
        topics = self.repository.list_topics(key)
        self.cache.store(key, topics)
        return self.topics

    @property
    def topics(self):
        key = self.active_organization_id
        if key is None:
            return []
        cached = self.cache.get(key)
        if cached is None:
            self.refresh()
            cached = self.cache.get(key) or []
        return list(cached)

    def get_topic(self, topic_id):
        topic = next((t for t in self.topics if t.id == topic_id), None)
        if topic is None:
            raise TopicNotFoundError(f"Topic {topic_id} not found")
        return topic

    # -- stages ---------------------------------------------------------------

    def select_stage(self, stage):
        if stage not in STAGES:
            raise ValueError(f"Unknown stage: {stage}")
        self.active_stage = stage

    def progress(self):
        return compute_progress(self.topics)

    def stages(self):
        completed = stage_completion(self.progress())
        return [
            {
                "key": stage,
                "label": STAGE_LABELS[stage],
                "completed": completed[stage],
                "active": stage == self.active_stage,
            }
            for stage in STAGES
        ]

    # -- identification -------------------------------------------------------

    def selection(self):
        return TopicSelectionManager(
            self.repository,
            self._require_organization(),
            topics=self.topics,
            default_custom_category=self.default_custom_category,
            on_change=self.cache.store,
        )

    def toggle_topic(self, slug):
        category, catalog_topic = get_catalog_topic(slug)
        if catalog_topic is None:
            raise ValueError(f"Unknown catalog topic: {slug}")
        return self.selection().toggle(slug, category, catalog_topic["subcategory"])

    def set_custom_topic_text(self, text):
        self.edit.custom_topic_text = text or ""

    def add_custom_topic(self, text=None, category=None):
        if text is None:
            text = self.edit.custom_topic_text
        created = self.selection().add_custom(text, category=category)
        if created is not None:
            self.edit.custom_topic_text = ""
        return created

    def remove_custom_topic(self, topic_id):
        topic = self.get_topic(topic_id)
        if not topic.is_custom:
            raise ValueError("Catalog topics are removed by toggling them off")
        self.selection().remove_custom(topic_id)

    def remove_topic(self, topic_id):
        """Delete exactly this record, catalog or custom."""
        self.get_topic(topic_id)
        self.repository.delete_topic(topic_id)
        logger.info(f"Removed topic {topic_id} from organization {self.active_organization_id}")
        self.refresh()

    # -- scoring --------------------------------------------------------------

    def open_score_editor(self, topic_id):
        topic = self.get_topic(topic_id)
        self.edit.report_topic_id = None
        self.edit.scoring_topic_id = topic_id
        self.edit.score_form = {
            "financialImpactScore": topic.financial_impact_score or 0,
            "impactOnStakeholders": topic.impact_on_stakeholders or 0,
            "stakeholderConcernLevel": topic.stakeholder_concern_level or "",
            "scoringJustification": topic.scoring_justification or "",
        }
        return self.edit.score_form

    @staticmethod
    def preview_index(financial, impact, concern_level):
        """Index preview for the score editor; None until all inputs are set."""
        if not can_compute(financial, impact, concern_level):
            return None
        index = materiality_index(financial, impact, concern_level)
        return {"materialityIndex": index, "level": classify(index), "isMaterial": is_material(index)}

    def save_scores(self, topic_id, financial, impact, concern_level, justification=None):
        self.get_topic(topic_id)
        updates = score_fields(financial, impact, concern_level, justification)
        topic = self.repository.update_topic(topic_id, updates)
        logger.info(
            f"Scored topic {topic_id}: index={updates['materiality_index']} "
            f"material={updates['is_material']}"
        )
        if self.edit.scoring_topic_id == topic_id:
            self.edit.scoring_topic_id = None
            self.edit.score_form = {}
        self.refresh()
        return topic

    # -- report ---------------------------------------------------------------

    def open_report_editor(self, topic_id):
        topic = self.get_topic(topic_id)
        self.edit.scoring_topic_id = None
        self.edit.report_topic_id = topic_id
        self.edit.report_form = {
            "whyMaterial": topic.why_material or "",
            "impactedStakeholders": list(topic.impacted_stakeholders or []),
            "businessRiskOrOpportunity": topic.business_risk_or_opportunity or "",
            "linkedStandards": list(topic.linked_standards or []),
            "managementResponse": topic.management_response or "",
        }
        return self.edit.report_form

    def save_report(self, topic_id, why_material, management_response,
                    impacted_stakeholders=(), business_risk_or_opportunity=None,
                    linked_standards=()):
        self.get_topic(topic_id)
        if business_risk_or_opportunity and business_risk_or_opportunity not in RISK_OR_OPPORTUNITY:
            raise ValueError(f"Unknown risk/opportunity type: {business_risk_or_opportunity}")
        updates = {
            "why_material": why_material,
            "management_response": management_response,
            "impacted_stakeholders": list(impacted_stakeholders or []),
            "business_risk_or_opportunity": business_risk_or_opportunity or None,
            "linked_standards": list(linked_standards or []),
        }
        topic = self.repository.update_topic(topic_id, updates)
        logger.info(f"Saved report narrative for topic {topic_id}")
        if self.edit.report_topic_id == topic_id:
            self.edit.report_topic_id = None
            self.edit.report_form = {}
        self.refresh()
        return topic

    def cancel_edit(self):
        self.edit.scoring_topic_id = None
        self.edit.report_topic_id = None
        self.edit.score_form = {}
        self.edit.report_form = {}

    # -- views ----------------------------------------------------------------

    def set_category_filter(self, category):
        if category not in CATEGORY_FILTERS:
            raise ValueError(f"Unknown category filter: {category}")
        self.category_filter = category

    def matrix(self, category=None):
        return plot_matrix(self.topics, category or self.category_filter, self.matrix_config)

    def report(self):
        return build_report(self.topics)

    def view(self):
        """Everything the presentation layer needs for the current state."""
        topics = self.topics
        catalog = (
            self.selection().catalog_state()
            if self.active_organization_id is not None
            else None
        )
        return {
            "organizationId": self.active_organization_id,
            "disabled": self.is_disabled,
            "activeStage": self.active_stage,
            "stages": self.stages(),
            "progress": compute_progress(topics).to_dict(),
            "topics": [t.to_dict() for t in topics],
            "catalog": catalog,
            "scale": LIKERT_SCALE,
            "concernLevels": list(CONCERN_LEVELS),
            "matrix": plot_matrix(topics, self.category_filter, self.matrix_config),
            "report": build_report(topics),
            "edit": {
                "scoringTopicId": self.edit.scoring_topic_id,
                "reportTopicId": self.edit.report_topic_id,
                "customTopicText": self.edit.custom_topic_text,
            },
        }
