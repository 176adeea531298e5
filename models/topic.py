from pydantic import field_validator
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import DateTime
from datetime import datetime, timezone
from typing import List, Optional, TYPE_CHECKING
from enum import Enum

if TYPE_CHECKING:
    from .category import Category
    from .tag import Tag


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Aware UTC datetime; naive values are taken to be UTC already"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TopicStatus(int, Enum):
    NORMAL = 0
    PUBLISHED = 1
    TRASH = 2


class CategoryTopic(SQLModel, table=True):
    category_id: int = Field(foreign_key="category.id", primary_key=True, ondelete="CASCADE")
    topic_id: int = Field(foreign_key="topic.id", primary_key=True, ondelete="CASCADE")


class TagTopic(SQLModel, table=True):
    tag_id: int = Field(foreign_key="tag.id", primary_key=True, ondelete="CASCADE")
    topic_id: int = Field(foreign_key="topic.id", primary_key=True, ondelete="CASCADE")


class TopicBase(SQLModel):
    title: str
    content: str = Field(default="")
    alias: Optional[str] = Field(default=None)
    summary: Optional[str] = Field(default=None)
    status: TopicStatus = Field(default=TopicStatus.NORMAL, index=True)
    allow_comment: bool = Field(default=True)


class Topic(TopicBase, table=True):
    id: int | None = Field(default=None, primary_key=True)
    create_date: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    create_user_id: int
    edit_date: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True), index=True)
    edit_user_id: int

    # Many-to-many relationships
    categories: List["Category"] = Relationship(
        back_populates="topics",
        link_model=CategoryTopic
    )
    tags: List["Tag"] = Relationship(
        back_populates="topics",
        link_model=TagTopic
    )


class TopicCategoryModel(SQLModel):
    id: int
    name: str


class TopicModel(TopicBase):
    id: int
    date: datetime
    create_date: datetime
    categories: List[TopicCategoryModel] = []
    tags: List[str] = []

    @field_validator("date", "create_date")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        # SQLite hands back naive values for timezone-aware columns
        return as_utc(value)


class TopicCreate(SQLModel):
    title: str
    content: str = ""
    status: TopicStatus = TopicStatus.NORMAL
    category_list: List[int] = []
    tag_list: List[str] = []
    alias: Optional[str] = None
    summary: Optional[str] = None
    date: Optional[datetime] = None
    allow_comment: bool = True


class TopicUpdate(TopicCreate):
    pass


class TopicStatusUpdate(SQLModel):
    id_list: List[int]
    status: TopicStatus
