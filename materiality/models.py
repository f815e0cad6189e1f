from datetime import datetime, timezone

from flask_login import UserMixin

from materiality import db, login_manager
from materiality.topics import Topic


@login_manager.request_loader
def load_user_from_request(request):
    # Identity is asserted by the fronting proxy after it authenticates the user
    user_id = request.headers.get("X-User-ID", "")
    if not user_id.isdigit():
        return None
    return db.session.get(User, int(user_id))


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False)
    full_name = db.Column(db.String(128), nullable=False)
    role = db.Column(db.String(20), nullable=False, default="organization")
    # Roles: organization, consultant
    created_at = db.Column(
        db.DateTime, default=lambda: datetime.now(timezone.utc)
    )

    owned_organizations = db.relationship("Organization", backref="owner", lazy="dynamic")
    client_links = db.relationship(
        "ConsultantClient", backref="consultant", lazy="dynamic", cascade="all, delete-orphan"
    )

    @property
    def is_consultant(self):
        return self.role == "consultant"

    def accessible_organizations(self):
        """Organizations this user may run an assessment for."""
        if self.is_consultant:
            return [link.organization for link in self.client_links.all()]
        return self.owned_organizations.order_by(Organization.id).all()

    def own_organization_id(self):
        if self.is_consultant:
            return None
        org = self.owned_organizations.order_by(Organization.id).first()
        return org.id if org else None


class Organization(db.Model):
    __tablename__ = "organizations"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(256), nullable=False)
    industry = db.Column(db.String(128), default="")
    country = db.Column(db.String(64), default="")
    reporting_year = db.Column(db.Integer, default=2024)
    owner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(
        db.DateTime, default=lambda: datetime.now(timezone.utc)
    )

    topics = db.relationship(
        "MaterialityTopic", backref="organization", lazy="dynamic", cascade="all, delete-orphan"
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "industry": self.industry,
            "country": self.country,
            "reportingYear": self.reporting_year,
        }


class ConsultantClient(db.Model):
    """Links a consultant to an organization they assess on its behalf."""
    __tablename__ = "consultant_clients"

    id = db.Column(db.Integer, primary_key=True)
    consultant_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    organization_id = db.Column(
        db.Integer, db.ForeignKey("organizations.id"), nullable=False
    )
    contact_person = db.Column(db.String(128), default="")
    contact_email = db.Column(db.String(120), default="")
    created_at = db.Column(
        db.DateTime, default=lambda: datetime.now(timezone.utc)
    )

    organization = db.relationship("Organization")

    __table_args__ = (
        db.UniqueConstraint("consultant_id", "organization_id", name="uq_consultant_org"),
    )


class MaterialityTopic(db.Model):
    __tablename__ = "materiality_topics"

    id = db.Column(db.Integer, primary_key=True)
    organization_id = db.Column(
        db.Integer, db.ForeignKey("organizations.id"), nullable=False, index=True
    )
    topic = db.Column(db.String(256), nullable=False)
    category = db.Column(db.String(20), nullable=False)
    # Category: environmental, social, governance
    subcategory = db.Column(db.String(10), nullable=True)
    # ESRS code: E1-E5, S1-S4, G1
    is_custom = db.Column(db.Boolean, default=False)

    financial_impact_score = db.Column(db.Integer, nullable=True)
    impact_on_stakeholders = db.Column(db.Integer, nullable=True)
    # Score: 0=None, 1=Low, 2=Medium, 3=High, 4=Very High, 5=Critical
    stakeholder_concern_level = db.Column(db.String(10), nullable=True)
    materiality_index = db.Column(db.Numeric(4, 2, asdecimal=False), nullable=True)
    is_material = db.Column(db.Boolean, nullable=True)
    scoring_justification = db.Column(db.Text, nullable=True)

    why_material = db.Column(db.Text, nullable=True)
    management_response = db.Column(db.Text, nullable=True)
    impacted_stakeholders = db.Column(db.JSON, default=list)
    business_risk_or_opportunity = db.Column(db.String(20), nullable=True)
    # risk, opportunity, both
    linked_standards = db.Column(db.JSON, default=list)

    created_at = db.Column(
        db.DateTime, default=lambda: datetime.now(timezone.utc)
    )
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def to_topic(self):
        return Topic(
            id=self.id,
            organization_id=self.organization_id,
            topic=self.topic,
            category=self.category,
            subcategory=self.subcategory,
            is_custom=bool(self.is_custom),
            financial_impact_score=self.financial_impact_score,
            impact_on_stakeholders=self.impact_on_stakeholders,
            stakeholder_concern_level=self.stakeholder_concern_level,
            scoring_justification=self.scoring_justification,
            materiality_index=self.materiality_index,
            is_material=self.is_material,
            why_material=self.why_material,
            management_response=self.management_response,
            impacted_stakeholders=list(self.impacted_stakeholders or []),
            business_risk_or_opportunity=self.business_risk_or_opportunity,
            linked_standards=list(self.linked_standards or []),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
