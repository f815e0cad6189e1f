from __future__ import annotations

import os

import pytest

# Keep the app factory off any developer database.
os.environ.pop("DATABASE_URL", None)

from config import Config
from materiality import create_app, db
from materiality.models import ConsultantClient, Organization, User
from materiality.repository import InMemoryTopicRepository, RepositoryError
from materiality.topics import Topic


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}


class RecordingRepository(InMemoryTopicRepository):
    """In-memory repository that records every mutating call."""

    def __init__(self, topics=()):
        super().__init__(topics)
        self.calls = []

    def create_topic(self, organization_id, topic, category, subcategory=None, is_custom=False):
        self.calls.append(("create", topic))
        return super().create_topic(organization_id, topic, category, subcategory, is_custom)

    def update_topic(self, topic_id, fields):
        self.calls.append(("update", topic_id))
        return super().update_topic(topic_id, fields)

    def delete_topic(self, topic_id):
        self.calls.append(("delete", topic_id))
        return super().delete_topic(topic_id)


class FailingRepository(RecordingRepository):
    """Mutations fail the way a lost database connection would."""

    def create_topic(self, *args, **kwargs):
        self.calls.append(("create", args[1] if len(args) > 1 else kwargs.get("topic")))
        raise RepositoryError("Failed to create materiality topic")

    def update_topic(self, topic_id, fields):
        self.calls.append(("update", topic_id))
        raise RepositoryError("Failed to update materiality topic")

    def delete_topic(self, topic_id):
        self.calls.append(("delete", topic_id))
        raise RepositoryError("Failed to delete materiality topic")


def make_topic(topic_id: int, organization_id: int = 1, **overrides) -> Topic:
    values = {
        "id": topic_id,
        "organization_id": organization_id,
        "topic": f"topic-{topic_id}",
        "category": "environmental",
        "subcategory": "E1",
    }
    values.update(overrides)
    return Topic(**values)


def scored_topic(topic_id: int, financial: int, impact: int, concern: str, **overrides) -> Topic:
    from materiality.scoring import score_fields

    fields = score_fields(financial, impact, concern)
    fields.update(overrides)
    return make_topic(topic_id, **fields)


@pytest.fixture()
def repository() -> RecordingRepository:
    return RecordingRepository()


@pytest.fixture()
def app():
    # Requests run in their own app context so every call re-resolves X-User-ID.
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()

        owner = User(email="owner@acme.test", full_name="Acme Owner", role="organization")
        other_owner = User(email="owner@globex.test", full_name="Globex Owner", role="organization")
        consultant = User(email="advisor@esg.test", full_name="ESG Advisor", role="consultant")
        db.session.add_all([owner, other_owner, consultant])
        db.session.flush()

        acme = Organization(name="Acme", owner_id=owner.id)
        initech = Organization(name="Initech")
        globex = Organization(name="Globex", owner_id=other_owner.id)
        db.session.add_all([acme, initech, globex])
        db.session.flush()

        db.session.add_all([
            ConsultantClient(consultant_id=consultant.id, organization_id=acme.id),
            ConsultantClient(consultant_id=consultant.id, organization_id=initech.id),
        ])
        db.session.commit()

        app.config["SEED"] = {
            "owner": owner.id,
            "other_owner": other_owner.id,
            "consultant": consultant.id,
            "acme": acme.id,
            "initech": initech.id,
            "globex": globex.id,
        }

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def seed(app) -> dict:
    return app.config["SEED"]


def auth(user_id: int) -> dict:
    return {"X-User-ID": str(user_id)}
