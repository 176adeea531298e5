from .topic import (
    Topic, TopicStatus, TopicModel, as_utc, utc_now, TopicCategoryModel, TopicCreate, TopicUpdate,
    TopicStatusUpdate, CategoryTopic, TagTopic,
)
from .tag import Tag, TagModel, TagUpdate, TopicCountModel
from .category import Category, CategoryModel, CategoryCreate, CategoryUpdate
from .response import BasicResponse, CreatedResponse, IdList, PagedResult, MonthStatisticsModel
from .editor import EditorAction, EditorCategory, EditorTopic, TopicEditorState, TopicSubmission

__all__ = [
    "Topic", "TopicStatus", "TopicModel", "as_utc", "utc_now", "TopicCategoryModel", "TopicCreate", "TopicUpdate",
    "TopicStatusUpdate", "CategoryTopic", "TagTopic",
    "Tag", "TagModel", "TagUpdate", "TopicCountModel",
    "Category", "CategoryModel", "CategoryCreate", "CategoryUpdate",
    "BasicResponse", "CreatedResponse", "IdList", "PagedResult", "MonthStatisticsModel",
    "EditorAction", "EditorCategory", "EditorTopic", "TopicEditorState", "TopicSubmission",
]
