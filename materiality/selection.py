"""
Topic selection for the identification stage.

Every user action maps to exactly one repository call. After a successful
call the organization's topic list is refetched and the selection is
re-derived from it; the selection is never kept independently of that list.
"""

import logging

from materiality.esrs_topics import CATEGORIES, ESRS_TOPICS

logger = logging.getLogger(__name__)


class TopicSelectionManager:
    def __init__(self, repository, organization_id, topics=None,
                 default_custom_category="governance", on_change=None):
        if default_custom_category not in CATEGORIES:
            raise ValueError(f"Unknown default category for custom topics: {default_custom_category}")
        self.repository = repository
        self.organization_id = organization_id
        self.default_custom_category = default_custom_category
        self.on_change = on_change
        self.topics = list(topics) if topics is not None else repository.list_topics(organization_id)

    @property
    def selected_slugs(self):
        return {t.topic for t in self.topics if not t.is_custom}

    @property
    def custom_topics(self):
        return [t for t in self.topics if t.is_custom]

    def is_selected(self, slug):
        return slug in self.selected_slugs

    def _find_catalog_topic(self, slug):
        return next((t for t in self.topics if t.topic == slug and not t.is_custom), None)

    def refresh(self):
        self.topics = self.repository.list_topics(self.organization_id)
        if self.on_change:
            self.on_change(self.organization_id, self.topics)
        return self.topics

    def toggle(self, slug, category, subcategory):
        """Select or deselect a catalog topic. Returns "created" or "deleted"."""
        existing = self._find_catalog_topic(slug)
        if existing is not None:
            self.repository.delete_topic(existing.id)
            action = "deleted"
        else:
            self.repository.create_topic(
                self.organization_id,
                topic=slug,
                category=category,
                subcategory=subcategory,
                is_custom=False,
            )
            action = "created"
        logger.info(f"Toggle {slug} for organization {self.organization_id}: {action}")
        self.refresh()
        return action

    def add_custom(self, text, category=None):
        """Create a custom topic. Blank text is ignored and returns None."""
        text = (text or "").strip()
        if not text:
            return None
        category = category or self.default_custom_category
        if category not in CATEGORIES:
            raise ValueError(f"Unknown category: {category}")
        created = self.repository.create_topic(
            self.organization_id,
            topic=text,
            category=category,
            subcategory=None,
            is_custom=True,
        )
        logger.info(f"Added custom topic {text!r} ({category}) for organization {self.organization_id}")
        self.refresh()
        return created

    def remove_custom(self, topic_id):
        self.repository.delete_topic(topic_id)
        logger.info(f"Removed custom topic {topic_id} for organization {self.organization_id}")
        self.refresh()

    def catalog_state(self):
        """Catalog grouped by category with a `selected` flag per topic."""
        selected = self.selected_slugs
        return {
            category: {
                "label": group["label"],
                "topics": [
                    {**topic, "selected": topic["id"] in selected}
                    for topic in group["topics"]
                ],
            }
            for category, group in ESRS_TOPICS.items()
        }
