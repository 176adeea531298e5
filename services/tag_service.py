from typing import List, Optional
from pydantic import TypeAdapter
from sqlalchemy import case, delete, func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select
import structlog

from cache import LookupCache
from models import Tag, TagModel, TagTopic, Topic, TopicCountModel, TopicStatus, PagedResult
from services import cache_keys
from services.exceptions import DuplicateError, NotFoundError, ValidationError

logger = structlog.get_logger(__name__)

_tag_list = TypeAdapter(List[TagModel])


class TagService:
    """Tag lookup table, served from the cache."""

    def __init__(self, session: Session, cache: LookupCache):
        self.session = session
        self.cache = cache

    def all(self) -> List[TagModel]:
        return self.cache.get_or_load(cache_keys.TAGS, self._load_all, _tag_list)

    def _load_all(self) -> List[TagModel]:
        counts = {
            tag_id: TopicCountModel(all=total or 0, published=published or 0)
            for tag_id, total, published in self.session.exec(
                select(
                    TagTopic.tag_id,
                    func.sum(case((Topic.status != TopicStatus.TRASH, 1), else_=0)),
                    func.sum(case((Topic.status == TopicStatus.PUBLISHED, 1), else_=0)),
                )
                .join(Topic, Topic.id == TagTopic.topic_id)
                .group_by(TagTopic.tag_id)
            ).all()
        }
        tags = self.session.exec(select(Tag).order_by(Tag.id)).all()
        return [
            TagModel(id=tag.id, keyword=tag.keyword, topics=counts.get(tag.id, TopicCountModel()))
            for tag in tags
        ]

    def query(self, page_index: int, page_size: int, keywords: Optional[str] = None) -> PagedResult[TagModel]:
        tags = self.all()
        if keywords and keywords.strip():
            tags = [t for t in tags if keywords in t.keyword]

        offset = (page_index - 1) * page_size
        return PagedResult[TagModel](items=tags[offset:offset + page_size], total=len(tags))

    def get(self, keyword: str) -> Optional[TagModel]:
        return next((t for t in self.all() if t.keyword == keyword), None)

    def delete(self, id_list: List[int]) -> None:
        if not id_list:
            return
        self.session.execute(
            delete(TagTopic).where(TagTopic.tag_id.in_(id_list)).execution_options(synchronize_session="fetch")
        )
        self.session.execute(
            delete(Tag).where(Tag.id.in_(id_list)).execution_options(synchronize_session="fetch")
        )
        self.session.commit()

        logger.info("tags_deleted", id_list=id_list)
        self.cache.invalidate(cache_keys.TAGS)
        self.cache.invalidate_prefix(cache_keys.RELATED_TOPICS)

    def edit(self, tag_id: int, keyword: str) -> None:
        keyword = (keyword or "").strip()
        if not keyword:
            raise ValidationError("Tag keyword is required")
        if any(t.keyword == keyword and t.id != tag_id for t in self.all()):
            raise DuplicateError("Tag keyword already exists")

        tag = self.session.get(Tag, tag_id)
        if not tag:
            raise NotFoundError("Tag not found")

        tag.keyword = keyword
        self.session.add(tag)
        try:
            self.session.commit()
        except IntegrityError:
            # The cached table can lag behind a concurrent rename
            self.session.rollback()
            raise DuplicateError("Tag keyword already exists")

        logger.info("tag_renamed", tag_id=tag_id, keyword=keyword)
        self.cache.invalidate(cache_keys.TAGS)
        self.cache.invalidate_prefix(cache_keys.RELATED_TOPICS)
