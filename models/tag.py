from sqlmodel import SQLModel, Field, Relationship
from typing import List, TYPE_CHECKING
from .topic import TagTopic

if TYPE_CHECKING:
    from .topic import Topic


class Tag(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    keyword: str = Field(index=True, unique=True)

    topics: List["Topic"] = Relationship(back_populates="tags", link_model=TagTopic)


class TopicCountModel(SQLModel):
    all: int = 0
    published: int = 0


class TagModel(SQLModel):
    id: int
    keyword: str
    topics: TopicCountModel = TopicCountModel()


class TagUpdate(SQLModel):
    keyword: str
