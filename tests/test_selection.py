import pytest

from conftest import FailingRepository, RecordingRepository
from materiality.esrs_topics import all_catalog_topics
from materiality.repository import RepositoryError
from materiality.selection import TopicSelectionManager


def _manager(repository, **kwargs):
    return TopicSelectionManager(repository, organization_id=1, **kwargs)


def test_toggle_on_creates_catalog_topic(repository: RecordingRepository) -> None:
    manager = _manager(repository)

    assert manager.toggle("ghg-emissions", "environmental", "E1") == "created"

    (topic,) = repository.list_topics(1)
    assert (topic.topic, topic.category, topic.subcategory, topic.is_custom) == (
        "ghg-emissions", "environmental", "E1", False,
    )
    assert manager.selected_slugs == {"ghg-emissions"}
    assert repository.calls == [("create", "ghg-emissions")]


def test_toggle_off_deletes_the_record(repository: RecordingRepository) -> None:
    manager = _manager(repository)
    manager.toggle("human-rights", "social", "S1")
    created_id = repository.list_topics(1)[0].id

    assert manager.toggle("human-rights", "social", "S1") == "deleted"

    assert repository.list_topics(1) == []
    assert manager.is_selected("human-rights") is False
    assert repository.calls[-1] == ("delete", created_id)


@pytest.mark.parametrize("catalog_topic", all_catalog_topics(), ids=lambda t: t["id"])
def test_toggle_on_then_off_restores_topic_set(catalog_topic: dict) -> None:
    repository = RecordingRepository()
    manager = _manager(repository)
    manager.add_custom("AI ethics")
    before = {(t.topic, t.is_custom) for t in repository.list_topics(1)}

    manager.toggle(catalog_topic["id"], catalog_topic["category"], catalog_topic["subcategory"])
    manager.toggle(catalog_topic["id"], catalog_topic["category"], catalog_topic["subcategory"])

    assert {(t.topic, t.is_custom) for t in repository.list_topics(1)} == before


def test_each_toggle_is_one_repository_call(repository: RecordingRepository) -> None:
    manager = _manager(repository)
    manager.toggle("pollution", "environmental", "E2")
    manager.toggle("whistleblower", "governance", "G1")
    manager.toggle("pollution", "environmental", "E2")

    assert [call[0] for call in repository.calls] == ["create", "create", "delete"]


def test_blank_custom_topic_is_a_no_op(repository: RecordingRepository) -> None:
    manager = _manager(repository)

    assert manager.add_custom("") is None
    assert manager.add_custom("   ") is None
    assert repository.calls == []


def test_custom_topic_defaults_to_governance(repository: RecordingRepository) -> None:
    manager = _manager(repository)

    created = manager.add_custom("  AI ethics ")

    assert created.topic == "AI ethics"
    assert created.category == "governance"
    assert created.subcategory is None
    assert created.is_custom is True
    assert [t.id for t in manager.custom_topics] == [created.id]
    assert manager.selected_slugs == set()


def test_custom_topic_default_category_is_configurable(repository: RecordingRepository) -> None:
    manager = _manager(repository, default_custom_category="social")

    assert manager.add_custom("Community radio").category == "social"
    assert manager.add_custom("Soil health", category="environmental").category == "environmental"


def test_custom_topics_may_share_a_name(repository: RecordingRepository) -> None:
    manager = _manager(repository)
    manager.add_custom("Data privacy")
    manager.add_custom("Data privacy")

    assert len(manager.custom_topics) == 2


def test_remove_custom_deletes_by_id(repository: RecordingRepository) -> None:
    manager = _manager(repository)
    created = manager.add_custom("AI ethics")

    manager.remove_custom(created.id)

    assert manager.custom_topics == []
    assert repository.calls[-1] == ("delete", created.id)


def test_selection_is_rederived_after_each_mutation(repository: RecordingRepository) -> None:
    seen = []
    manager = _manager(repository, on_change=lambda org_id, topics: seen.append((org_id, len(topics))))

    manager.toggle("anti-corruption", "governance", "G1")
    manager.add_custom("AI ethics")

    assert seen == [(1, 1), (1, 2)]


def test_failed_create_surfaces_error_and_keeps_state() -> None:
    repository = FailingRepository()
    manager = _manager(repository)

    with pytest.raises(RepositoryError):
        manager.toggle("biodiversity", "environmental", "E4")

    assert manager.selected_slugs == set()
    assert len(repository.calls) == 1


def test_catalog_state_flags_selected_topics(repository: RecordingRepository) -> None:
    manager = _manager(repository)
    manager.toggle("end-users", "social", "S4")

    state = manager.catalog_state()

    social = {t["id"]: t["selected"] for t in state["social"]["topics"]}
    assert social["end-users"] is True
    assert social["human-rights"] is False
    assert state["governance"]["label"] == "Governance (G1)"


def test_unknown_default_category_is_rejected(repository: RecordingRepository) -> None:
    with pytest.raises(ValueError):
        _manager(repository, default_custom_category="economic")
