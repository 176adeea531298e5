import pytest

from conftest import day
from models import EditorAction, TopicStatus, TopicSubmission
from services.editor import available_actions
from services.exceptions import NotFoundError, ValidationError


def test_actions_for_new_topic():
    assert available_actions(None, TopicStatus.NORMAL) == [
        EditorAction.PUBLISH, EditorAction.SAVE, EditorAction.CANCEL
    ]


def test_actions_for_published_topic():
    assert available_actions(5, TopicStatus.PUBLISHED) == [
        EditorAction.VIEW, EditorAction.DRAFT, EditorAction.SAVE, EditorAction.CANCEL
    ]


def test_actions_for_draft_topic():
    assert available_actions(5, TopicStatus.NORMAL) == [
        EditorAction.VIEW, EditorAction.PUBLISH, EditorAction.SAVE, EditorAction.CANCEL
    ]


def test_load_empty_topic(editor, categories):
    state = editor.load()

    assert state.topic.id is None
    assert state.topic.title == ""
    assert state.topic.allow_comment is True
    assert state.tags == []
    assert [c.checked for c in state.categories] == [False, False]
    assert state.actions[0] == EditorAction.PUBLISH


def test_load_existing_topic(editor, topic_service, categories):
    python_id, web_id = categories
    topic_id = topic_service.add(
        "Post", "Body", status=TopicStatus.PUBLISHED,
        category_list=[web_id], tag_list=["orm"], date=day(2),
    )

    state = editor.load(topic_id)

    assert state.topic.id == topic_id
    assert state.topic.date == day(2)
    assert state.tags == ["orm"]
    assert {c.id: c.checked for c in state.categories} == {python_id: False, web_id: True}
    assert EditorAction.DRAFT in state.actions


def test_load_missing_topic(editor):
    with pytest.raises(NotFoundError):
        editor.load(77)


def test_submit_requires_title(editor):
    with pytest.raises(ValidationError, match="title"):
        editor.submit(TopicSubmission(title="", content="Body"))


def test_submit_rejects_non_saving_action(editor):
    with pytest.raises(ValidationError):
        editor.submit(TopicSubmission(title="Post"), EditorAction.CANCEL)


def test_publish_new_topic(editor, topic_service, categories):
    python_id, _ = categories
    submission = TopicSubmission(title="Post", content="Body", tags=["orm"], checked_categories=[python_id])

    topic_id = editor.submit(submission, EditorAction.PUBLISH)

    topic = topic_service.get(topic_id)
    assert topic.status == TopicStatus.PUBLISHED
    assert topic.tags == ["orm"]
    assert [c.id for c in topic.categories] == [python_id]


def test_draft_and_save_existing_topic(editor, topic_service):
    topic_id = topic_service.add("Post", "", status=TopicStatus.PUBLISHED)

    assert editor.submit(TopicSubmission(title="Post", status=TopicStatus.PUBLISHED), EditorAction.DRAFT, topic_id) == topic_id
    assert topic_service.get(topic_id).status == TopicStatus.NORMAL

    editor.submit(TopicSubmission(title="Renamed", status=TopicStatus.NORMAL), EditorAction.SAVE, topic_id)
    topic = topic_service.get(topic_id)
    assert topic.title == "Renamed"
    assert topic.status == TopicStatus.NORMAL
