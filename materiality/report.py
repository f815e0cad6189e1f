"""
Material Topics Report

Final output of the assessment: every material topic (index >= 3.0) with its
classification, narrative justification and management response, plus
report completion figures and a per-category breakdown.
"""

from materiality.esrs_topics import CATEGORIES, topic_label
from materiality.scoring import classify


def material_topics(topics):
    """Material topics, highest materiality index first."""
    material = [t for t in topics if t.is_material and t.materiality_index is not None]
    return sorted(material, key=lambda t: (-float(t.materiality_index), t.topic))


def report_entry(topic):
    index = float(topic.materiality_index)
    return {
        "id": topic.id,
        "topic": topic.topic,
        "label": topic_label(topic.topic),
        "category": topic.category,
        "subcategory": topic.subcategory,
        "isCustom": topic.is_custom,
        "materialityIndex": index,
        "level": classify(index),
        "financialImpactScore": topic.financial_impact_score,
        "impactOnStakeholders": topic.impact_on_stakeholders,
        "stakeholderConcernLevel": topic.stakeholder_concern_level,
        "scoringJustification": topic.scoring_justification,
        "whyMaterial": topic.why_material,
        "managementResponse": topic.management_response,
        "impactedStakeholders": list(topic.impacted_stakeholders or []),
        "businessRiskOrOpportunity": topic.business_risk_or_opportunity,
        "linkedStandards": list(topic.linked_standards or []),
        "reportComplete": topic.report_complete,
    }


def build_report(topics):
    """
    Build the material topics report for one organization's topic list.

    Returns:
        dict with:
        - topics: report entries for material topics, highest index first
        - summary: material count, completed count and completion percentage
        - byCategory: material topic ids grouped by ESG category
    """
    material = material_topics(topics)
    entries = [report_entry(t) for t in material]
    completed = sum(1 for e in entries if e["reportComplete"])

    by_category = {category: [] for category in CATEGORIES}
    for entry in entries:
        by_category.setdefault(entry["category"] or "other", []).append(entry["id"])

    return {
        "topics": entries,
        "summary": {
            "materialTopics": len(entries),
            "completedReports": completed,
            "completionPercentage": round(completed / len(entries) * 100) if entries else 0,
        },
        "byCategory": by_category,
    }
