from typing import List, Optional
from pydantic import TypeAdapter
from sqlalchemy import case, delete, func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select
import structlog

from cache import LookupCache
from models import Category, CategoryModel, CategoryTopic, Topic, TopicCountModel, TopicStatus
from services import cache_keys
from services.exceptions import DuplicateError, NotFoundError

logger = structlog.get_logger(__name__)

_category_list = TypeAdapter(List[CategoryModel])


class CategoryService:
    def __init__(self, session: Session, cache: LookupCache):
        self.session = session
        self.cache = cache

    def all(self) -> List[CategoryModel]:
        return self.cache.get_or_load(cache_keys.CATEGORIES, self._load_all, _category_list)

    def _load_all(self) -> List[CategoryModel]:
        counts = {
            category_id: TopicCountModel(all=total or 0, published=published or 0)
            for category_id, total, published in self.session.exec(
                select(
                    CategoryTopic.category_id,
                    func.sum(case((Topic.status != TopicStatus.TRASH, 1), else_=0)),
                    func.sum(case((Topic.status == TopicStatus.PUBLISHED, 1), else_=0)),
                )
                .join(Topic, Topic.id == CategoryTopic.topic_id)
                .group_by(CategoryTopic.category_id)
            ).all()
        }
        categories = self.session.exec(select(Category).order_by(Category.id)).all()
        return [
            CategoryModel(
                id=category.id,
                name=category.name,
                description=category.description,
                topics=counts.get(category.id, TopicCountModel()),
            )
            for category in categories
        ]

    def _check_name(self, name: str, category_id: Optional[int] = None) -> None:
        if any(c.name == name and c.id != category_id for c in self.all()):
            raise DuplicateError("Category name already exists")

    def add(self, name: str, description: Optional[str] = None) -> int:
        self._check_name(name)

        category = Category(name=name, description=description)
        self.session.add(category)
        self._commit()
        self.session.refresh(category)

        logger.info("category_added", category_id=category.id, name=name)
        self.cache.invalidate(cache_keys.CATEGORIES)
        return category.id

    def edit(self, category_id: int, name: str, description: Optional[str] = None) -> None:
        self._check_name(name, category_id)

        category = self.session.get(Category, category_id)
        if not category:
            raise NotFoundError("Category not found")

        category.name = name
        category.description = description
        self.session.add(category)
        self._commit()

        logger.info("category_edited", category_id=category_id, name=name)
        # Related-topic lists carry category names
        self.cache.invalidate(cache_keys.CATEGORIES)
        self.cache.invalidate_prefix(cache_keys.RELATED_TOPICS)

    def _commit(self) -> None:
        try:
            self.session.commit()
        except IntegrityError:
            # The cached table can lag behind a concurrent write
            self.session.rollback()
            raise DuplicateError("Category name already exists")

    def remove(self, id_list: List[int]) -> None:
        if not id_list:
            return
        self.session.execute(
            delete(CategoryTopic).where(CategoryTopic.category_id.in_(id_list)).execution_options(synchronize_session="fetch")
        )
        self.session.execute(
            delete(Category).where(Category.id.in_(id_list)).execution_options(synchronize_session="fetch")
        )
        self.session.commit()

        logger.info("categories_removed", id_list=id_list)
        # Related-topic lists were built from the removed links
        self.cache.invalidate(cache_keys.CATEGORIES)
        self.cache.invalidate_prefix(cache_keys.RELATED_TOPICS)
