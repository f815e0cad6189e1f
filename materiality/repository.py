"""
Topic repository.

The assessment engine only talks to storage through `TopicRepository`.
Two implementations ship:

- InMemoryTopicRepository: dict-backed, used by tests and scripts
- SqlTopicRepository: Flask-SQLAlchemy backed, used by the web app

Every failure surfaces as RepositoryError carrying a human-readable message;
callers do not interpret anything beyond success/failure.
"""

import itertools
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError

from materiality.topics import Topic, UPDATABLE_FIELDS

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """A create/update/delete/list call against topic storage failed."""


class TopicRepository(ABC):
    @abstractmethod
    def list_topics(self, organization_id):
        """Return all topics of an organization, newest first."""

    @abstractmethod
    def create_topic(self, organization_id, topic, category, subcategory=None, is_custom=False):
        """Create a topic record and return it with its assigned id."""

    @abstractmethod
    def update_topic(self, topic_id, fields):
        """Apply a partial update and return the updated topic."""

    @abstractmethod
    def delete_topic(self, topic_id):
        """Remove a topic record."""


def _check_fields(fields):
    unknown = set(fields) - set(UPDATABLE_FIELDS)
    if unknown:
        raise RepositoryError(f"Cannot update topic fields: {', '.join(sorted(unknown))}")


class InMemoryTopicRepository(TopicRepository):
    def __init__(self, topics=()):
        self._topics = {}
        self._ids = itertools.count(1)
        for topic in topics:
            self._topics[topic.id] = topic
        if self._topics:
            self._ids = itertools.count(max(self._topics) + 1)

    def list_topics(self, organization_id):
        topics = [t for t in self._topics.values() if t.organization_id == organization_id]
        return sorted(topics, key=lambda t: t.id, reverse=True)

    def create_topic(self, organization_id, topic, category, subcategory=None, is_custom=False):
        now = datetime.now(timezone.utc)
        record = Topic(
            id=next(self._ids),
            organization_id=organization_id,
            topic=topic,
            category=category,
            subcategory=subcategory,
            is_custom=is_custom,
            created_at=now,
            updated_at=now,
        )
        self._topics[record.id] = record
        return record

    def update_topic(self, topic_id, fields):
        _check_fields(fields)
        existing = self._topics.get(topic_id)
        if existing is None:
            raise RepositoryError(f"Topic {topic_id} not found")
        updated = existing.apply({**fields, "updated_at": datetime.now(timezone.utc)})
        self._topics[topic_id] = updated
        return updated

    def delete_topic(self, topic_id):
        if self._topics.pop(topic_id, None) is None:
            raise RepositoryError(f"Topic {topic_id} not found")


class SqlTopicRepository(TopicRepository):
    """Topic storage on the application's Flask-SQLAlchemy session."""

    def __init__(self, db):
        self.db = db

    def _model(self):
        from materiality.models import MaterialityTopic
        return MaterialityTopic

    def list_topics(self, organization_id):
        MaterialityTopic = self._model()
        try:
            rows = (
                MaterialityTopic.query.filter_by(organization_id=organization_id)
                .order_by(MaterialityTopic.created_at.desc(), MaterialityTopic.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch topics for organization {organization_id}: {e}")
            raise RepositoryError("Failed to fetch materiality topics") from e
        return [row.to_topic() for row in rows]

    def create_topic(self, organization_id, topic, category, subcategory=None, is_custom=False):
        MaterialityTopic = self._model()
        row = MaterialityTopic(
            organization_id=organization_id,
            topic=topic,
            category=category,
            subcategory=subcategory,
            is_custom=is_custom,
        )
        try:
            self.db.session.add(row)
            self.db.session.commit()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            logger.error(f"Failed to create topic {topic!r} for organization {organization_id}: {e}")
            raise RepositoryError("Failed to create materiality topic") from e
        logger.info(f"Created topic {row.id} ({topic}) for organization {organization_id}")
        return row.to_topic()

    def update_topic(self, topic_id, fields):
        _check_fields(fields)
        MaterialityTopic = self._model()
        try:
            row = self.db.session.get(MaterialityTopic, topic_id)
            if row is None:
                raise RepositoryError(f"Topic {topic_id} not found")
            for key, value in fields.items():
                setattr(row, key, value)
            self.db.session.commit()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            logger.error(f"Failed to update topic {topic_id}: {e}")
            raise RepositoryError("Failed to update materiality topic") from e
        logger.info(f"Updated topic {topic_id}: {', '.join(sorted(fields))}")
        return row.to_topic()

    def delete_topic(self, topic_id):
        MaterialityTopic = self._model()
        try:
            row = self.db.session.get(MaterialityTopic, topic_id)
            if row is None:
                raise RepositoryError(f"Topic {topic_id} not found")
            self.db.session.delete(row)
            self.db.session.commit()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            logger.error(f"Failed to delete topic {topic_id}: {e}")
            raise RepositoryError("Failed to delete materiality topic") from e
        logger.info(f"Deleted topic {topic_id}")
