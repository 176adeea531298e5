from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel

from .topic import TopicStatus


class EditorAction(str, Enum):
    PUBLISH = "publish"
    DRAFT = "draft"
    SAVE = "save"
    CANCEL = "cancel"
    VIEW = "view"


class EditorCategory(BaseModel):
    id: int
    name: str
    checked: bool = False


class EditorTopic(BaseModel):
    id: Optional[int] = None
    title: str = ""
    content: str = ""
    alias: Optional[str] = None
    summary: Optional[str] = None
    status: TopicStatus = TopicStatus.NORMAL
    date: Optional[datetime] = None
    allow_comment: bool = True


class TopicEditorState(BaseModel):
    topic: EditorTopic
    categories: List[EditorCategory]
    tags: List[str]
    actions: List[EditorAction]


class TopicSubmission(BaseModel):
    """Form payload posted by the topic editor."""
    title: str = ""
    content: str = ""
    status: TopicStatus = TopicStatus.NORMAL
    alias: Optional[str] = None
    summary: Optional[str] = None
    date: Optional[datetime] = None
    allow_comment: bool = True
    tags: List[str] = []
    checked_categories: List[int] = []
