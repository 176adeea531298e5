from typing import List, Optional
import structlog

from models import (
    EditorAction, EditorCategory, EditorTopic, TopicEditorState, TopicStatus, TopicSubmission,
)
from services.category_service import CategoryService
from services.exceptions import NotFoundError, ValidationError
from services.topic_service import TopicService

logger = structlog.get_logger(__name__)


def available_actions(topic_id: Optional[int], status: TopicStatus) -> List[EditorAction]:
    """Buttons the editor offers for a topic in its current state"""
    if not topic_id:
        return [EditorAction.PUBLISH, EditorAction.SAVE, EditorAction.CANCEL]
    if status == TopicStatus.PUBLISHED:
        return [EditorAction.VIEW, EditorAction.DRAFT, EditorAction.SAVE, EditorAction.CANCEL]
    return [EditorAction.VIEW, EditorAction.PUBLISH, EditorAction.SAVE, EditorAction.CANCEL]


class TopicEditor:
    """Server side of the admin topic form.

    ``load`` assembles what the form shows: the topic, the category list
    with the topic's categories checked, its tags and the buttons that
    apply. ``submit`` turns a posted form into an add or an edit.
    """

    def __init__(self, topics: TopicService, categories: CategoryService):
        self.topics = topics
        self.categories = categories

    def load(self, topic_id: Optional[int] = None) -> TopicEditorState:
        category_list = self.categories.all()

        if topic_id:
            model = self.topics.get(topic_id)
            if model is None:
                raise NotFoundError("Topic not found")
            topic = EditorTopic(
                id=model.id,
                title=model.title,
                content=model.content,
                alias=model.alias,
                summary=model.summary,
                status=model.status,
                date=model.date,
                allow_comment=model.allow_comment,
            )
            tags = list(model.tags)
            checked = {c.id for c in model.categories}
        else:
            topic = EditorTopic()
            tags = []
            checked = set()

        return TopicEditorState(
            topic=topic,
            categories=[
                EditorCategory(id=c.id, name=c.name, checked=c.id in checked)
                for c in category_list
            ],
            tags=tags,
            actions=available_actions(topic.id, topic.status),
        )

    def submit(
        self,
        submission: TopicSubmission,
        action: EditorAction = EditorAction.SAVE,
        topic_id: Optional[int] = None,
    ) -> int:
        if not submission.title:
            raise ValidationError("Please enter the topic title")
        if action not in (EditorAction.PUBLISH, EditorAction.DRAFT, EditorAction.SAVE):
            raise ValidationError(f"Action '{action.value}' does not submit the form")

        status = submission.status
        if action == EditorAction.PUBLISH:
            status = TopicStatus.PUBLISHED
        elif action == EditorAction.DRAFT:
            status = TopicStatus.NORMAL

        fields = dict(
            title=submission.title,
            content=submission.content,
            status=status,
            category_list=submission.checked_categories,
            tag_list=submission.tags,
            alias=submission.alias,
            summary=submission.summary,
            date=submission.date,
            allow_comment=submission.allow_comment,
        )

        if topic_id:
            self.topics.edit(topic_id, **fields)
        else:
            topic_id = self.topics.add(**fields)

        logger.info("editor_submitted", topic_id=topic_id, action=action.value)
        return topic_id
