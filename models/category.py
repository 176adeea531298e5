from sqlmodel import SQLModel, Field, Relationship
from typing import List, Optional, TYPE_CHECKING
from .topic import CategoryTopic
from .tag import TopicCountModel

if TYPE_CHECKING:
    from .topic import Topic


class CategoryBase(SQLModel):
    name: str = Field(index=True, unique=True)
    description: Optional[str] = Field(default=None)


class Category(CategoryBase, table=True):
    id: int | None = Field(default=None, primary_key=True)

    topics: List["Topic"] = Relationship(back_populates="categories", link_model=CategoryTopic)


class CategoryModel(CategoryBase):
    id: int
    topics: TopicCountModel = TopicCountModel()


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(CategoryBase):
    pass
