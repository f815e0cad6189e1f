import logging

from flask import Blueprint, current_app, jsonify, request
from flask_login import login_required, current_user

from materiality import db
from materiality.esrs_topics import ESRS_TOPICS, LINKED_STANDARDS, RISK_OR_OPPORTUNITY, STAKEHOLDER_OPTIONS
from materiality.matrix import MatrixConfig
from materiality.models import MaterialityTopic
from materiality.repository import RepositoryError, SqlTopicRepository
from materiality.scoring import LIKERT_SCALE, validate_score
from materiality.topics import CONCERN_LEVELS
from materiality.workflow import (
    STAGE_LABELS,
    Actor,
    AssessmentWorkflow,
    OrganizationAccessError,
    TopicNotFoundError,
)

logger = logging.getLogger(__name__)

assessment_bp = Blueprint("assessment", __name__, url_prefix="/api/materiality")


@assessment_bp.errorhandler(OrganizationAccessError)
def _access_denied(error):
    return jsonify({"ok": False, "error": str(error)}), 403


@assessment_bp.errorhandler(TopicNotFoundError)
def _topic_not_found(error):
    return jsonify({"ok": False, "error": str(error)}), 404


@assessment_bp.errorhandler(RepositoryError)
def _repository_failed(error):
    logger.error(f"Repository error on {request.method} {request.path}: {error}")
    return jsonify({"ok": False, "error": str(error)}), 500


def _bad_request(message):
    return jsonify({"ok": False, "error": message}), 400


def _actor_for(user):
    if user.is_consultant:
        return Actor(
            role="consultant",
            client_organization_ids=tuple(o.id for o in user.accessible_organizations()),
        )
    return Actor(role="organization", organization_id=user.own_organization_id())


def _json_body():
    """Request JSON as a dict; an absent body reads as empty."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object.")
    return data


def _text_field(data, key):
    """Stripped string value of a JSON field, None when absent or blank."""
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string.")
    return value.strip() or None


def _requested_organization_id():
    """organizationId from the query string or JSON body; None when absent."""
    raw = request.args.get("organizationId")
    if raw is None and request.is_json:
        raw = _json_body().get("organizationId")
    if raw in (None, "", "none"):
        return None
    if isinstance(raw, bool):
        raise ValueError("Invalid organizationId parameter")
    try:
        organization_id = int(raw)
    except (TypeError, ValueError):
        raise ValueError("Invalid organizationId parameter")
    if organization_id <= 0:
        raise ValueError("Invalid organizationId parameter")
    return organization_id


def _build_workflow(organization_id=None):
    """Workflow for the current user, focused on the requested organization."""
    actor = _actor_for(current_user)
    workflow = AssessmentWorkflow(
        SqlTopicRepository(db),
        actor,
        matrix_config=MatrixConfig.from_app_config(current_app.config),
        default_custom_category=current_app.config.get("CUSTOM_TOPIC_DEFAULT_CATEGORY", "governance"),
    )
    if organization_id is None and actor.is_consultant:
        # Consultants see a disabled workflow until they pick a client
        return workflow
    if organization_id is not None:
        workflow.set_active_organization(organization_id)
    elif actor.organization_id is None:
        raise OrganizationAccessError("No organization found for user")
    return workflow


def _workflow_from_request():
    return _build_workflow(_requested_organization_id())


def _workflow_for_topic(topic_id):
    row = db.session.get(MaterialityTopic, topic_id)
    if row is None:
        raise TopicNotFoundError(f"Topic {topic_id} not found")
    return _build_workflow(row.organization_id)


@assessment_bp.route("/catalog")
@login_required
def catalog():
    return jsonify({
        "categories": ESRS_TOPICS,
        "stakeholderOptions": STAKEHOLDER_OPTIONS,
        "linkedStandards": LINKED_STANDARDS,
        "riskOrOpportunity": list(RISK_OR_OPPORTUNITY),
        "likertScale": LIKERT_SCALE,
        "concernLevels": list(CONCERN_LEVELS),
        "stages": STAGE_LABELS,
    })


@assessment_bp.route("/organizations")
@login_required
def organizations():
    orgs = current_user.accessible_organizations()
    return jsonify({
        "role": current_user.role,
        "organizations": [o.to_dict() for o in orgs],
    })


@assessment_bp.route("/topics")
@login_required
def list_topics():
    try:
        workflow = _workflow_from_request()
    except ValueError as e:
        return _bad_request(str(e))
    return jsonify([t.to_dict() for t in workflow.topics])


@assessment_bp.route("/topics/toggle", methods=["POST"])
@login_required
def toggle_topic():
    try:
        slug = _text_field(_json_body(), "topic")
        if not slug:
            return _bad_request("No topic provided.")
        workflow = _workflow_from_request()
        action = workflow.toggle_topic(slug)
    except ValueError as e:
        return _bad_request(str(e))
    return jsonify({
        "ok": True,
        "action": action,
        "selected": workflow.selection().is_selected(slug),
        "topics": [t.to_dict() for t in workflow.topics],
    })


@assessment_bp.route("/topics/custom", methods=["POST"])
@login_required
def add_custom_topic():
    try:
        data = _json_body()
        text = _text_field(data, "topic")
        if not text:
            return _bad_request("Enter a topic name.")
        workflow = _workflow_from_request()
        created = workflow.add_custom_topic(text, category=_text_field(data, "category"))
    except ValueError as e:
        return _bad_request(str(e))
    return jsonify({"ok": True, "topic": created.to_dict()}), 201


@assessment_bp.route("/topics/<int:topic_id>", methods=["DELETE"])
@login_required
def delete_topic(topic_id):
    workflow = _workflow_for_topic(topic_id)
    workflow.remove_topic(topic_id)
    return jsonify({"ok": True, "message": "Topic deleted successfully"})


@assessment_bp.route("/topics/<int:topic_id>/scores", methods=["PATCH"])
@login_required
def save_scores(topic_id):
    try:
        data = _json_body()
        justification = _text_field(data, "scoringJustification")
    except ValueError as e:
        return _bad_request(str(e))
    financial, error = validate_score(data.get("financialImpactScore"), "Financial impact score")
    if error:
        return _bad_request(error)
    impact, error = validate_score(data.get("impactOnStakeholders"), "Impact on stakeholders")
    if error:
        return _bad_request(error)
    concern = data.get("stakeholderConcernLevel")
    if concern not in CONCERN_LEVELS:
        return _bad_request("Select a stakeholder concern level (low, medium or high).")

    workflow = _workflow_for_topic(topic_id)
    topic = workflow.save_scores(topic_id, financial, impact, concern, justification=justification)
    return jsonify({"ok": True, "topic": topic.to_dict(), "progress": workflow.progress().to_dict()})


@assessment_bp.route("/topics/<int:topic_id>/report", methods=["PATCH"])
@login_required
def save_report(topic_id):
    try:
        data = _json_body()
        why_material = _text_field(data, "whyMaterial")
        management_response = _text_field(data, "managementResponse")
        risk_or_opportunity = _text_field(data, "businessRiskOrOpportunity")
    except ValueError as e:
        return _bad_request(str(e))
    stakeholders = data.get("impactedStakeholders") or []
    standards = data.get("linkedStandards") or []
    if not isinstance(stakeholders, list) or not isinstance(standards, list):
        return _bad_request("impactedStakeholders and linkedStandards must be lists.")

    workflow = _workflow_for_topic(topic_id)
    try:
        topic = workflow.save_report(
            topic_id,
            why_material=why_material,
            management_response=management_response,
            impacted_stakeholders=stakeholders,
            business_risk_or_opportunity=risk_or_opportunity,
            linked_standards=standards,
        )
    except ValueError as e:
        return _bad_request(str(e))
    return jsonify({"ok": True, "topic": topic.to_dict(), "progress": workflow.progress().to_dict()})


@assessment_bp.route("/matrix")
@login_required
def matrix():
    try:
        workflow = _workflow_from_request()
        return jsonify(workflow.matrix(request.args.get("category", "all")))
    except ValueError as e:
        return _bad_request(str(e))


@assessment_bp.route("/progress")
@login_required
def progress():
    try:
        workflow = _workflow_from_request()
    except ValueError as e:
        return _bad_request(str(e))
    return jsonify({
        "progress": workflow.progress().to_dict(),
        "stages": workflow.stages(),
    })


@assessment_bp.route("/report")
@login_required
def report():
    try:
        workflow = _workflow_from_request()
    except ValueError as e:
        return _bad_request(str(e))
    return jsonify(workflow.report())


@assessment_bp.route("/workflow")
@login_required
def workflow_view():
    """Aggregate view of all four stages for the selected organization."""
    try:
        workflow = _workflow_from_request()
        workflow.select_stage(request.args.get("stage", "identification"))
        workflow.set_category_filter(request.args.get("category", "all"))
    except ValueError as e:
        return _bad_request(str(e))
    return jsonify(workflow.view())
