from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple
from prometheus_client import Counter
from pydantic import TypeAdapter
from sqlalchemy import func
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select
from sqlmodel.sql.expression import SelectOfScalar
import structlog

from cache import LookupCache
from core.config import get_settings
from models import (
    Category, CategoryTopic, Tag, TagTopic, Topic, TopicStatus,
    TopicModel, TopicCategoryModel, PagedResult, MonthStatisticsModel, as_utc, utc_now,
)
from services import cache_keys
from services.exceptions import NotFoundError

settings = get_settings()
logger = structlog.get_logger(__name__)

topic_writes_total = Counter(
    "blog_topic_writes_total",
    "Topic writes by operation",
    ["operation"]
)

_topic_list = TypeAdapter(List[TopicModel])
_month_statistics_list = TypeAdapter(List[MonthStatisticsModel])


def _distinct_categories(category_list: Optional[Sequence[int]]) -> List[int]:
    return list(dict.fromkeys(category_list or []))


def _distinct_keywords(tag_list: Optional[Sequence[str]]) -> List[str]:
    return list(dict.fromkeys(
        keyword.strip() for keyword in (tag_list or []) if keyword and keyword.strip()
    ))


class TopicService:
    """Topic writes, archive queries and the caches that depend on them."""

    def __init__(self, session: Session, cache: LookupCache):
        self.session = session
        self.cache = cache

    def add(
        self,
        title: str,
        content: str,
        status: TopicStatus = TopicStatus.NORMAL,
        category_list: Optional[Sequence[int]] = None,
        tag_list: Optional[Sequence[str]] = None,
        alias: Optional[str] = None,
        summary: Optional[str] = None,
        date: Optional[datetime] = None,
        allow_comment: bool = True,
    ) -> int:
        """Create a topic together with its category and tag links.

        Unknown category ids are skipped; unknown tag keywords become new
        tags. Everything is written in a single commit.
        """
        now = utc_now()
        try:
            categories, tags = self._resolve_links(category_list, tag_list)

            topic = Topic(
                title=title,
                content=content,
                status=status,
                alias=alias,
                summary=summary,
                allow_comment=allow_comment is True,
                create_date=now,
                create_user_id=settings.DEFAULT_AUTHOR_ID,
                edit_date=as_utc(date) or now,
                edit_user_id=settings.DEFAULT_AUTHOR_ID,
            )
            self.session.add(topic)
            self._link(topic, categories, tags)
            self.session.commit()
        except Exception:
            self.session.rollback()
            logger.exception("topic_add_failed", title=title)
            raise

        topic_writes_total.labels(operation="add").inc()
        logger.info("topic_added", topic_id=topic.id, categories=len(categories), tags=len(tags))
        self._invalidate()
        return topic.id

    def edit(
        self,
        topic_id: int,
        title: str,
        content: str,
        status: TopicStatus = TopicStatus.NORMAL,
        category_list: Optional[Sequence[int]] = None,
        tag_list: Optional[Sequence[str]] = None,
        alias: Optional[str] = None,
        summary: Optional[str] = None,
        date: Optional[datetime] = None,
        allow_comment: bool = True,
    ) -> None:
        """Update a topic and rebuild its category and tag links.

        Old links are deleted and flushed before the new ones are inserted,
        all inside one transaction; on failure nothing is kept.
        """
        topic = self.session.get(Topic, topic_id)
        if not topic:
            raise NotFoundError("Topic not found")

        try:
            for link in self.session.exec(
                select(CategoryTopic).where(CategoryTopic.topic_id == topic_id)
            ).all():
                self.session.delete(link)
            for link in self.session.exec(select(TagTopic).where(TagTopic.topic_id == topic_id)).all():
                self.session.delete(link)
            self.session.flush()

            categories, tags = self._resolve_links(category_list, tag_list)

            topic.title = title
            topic.content = content
            topic.status = status
            topic.alias = alias
            topic.summary = summary
            topic.edit_date = as_utc(date) or utc_now()
            topic.edit_user_id = settings.DEFAULT_AUTHOR_ID
            topic.allow_comment = allow_comment is True
            self.session.add(topic)

            self._link(topic, categories, tags)
            self.session.commit()
        except Exception:
            self.session.rollback()
            logger.exception("topic_edit_failed", topic_id=topic_id)
            raise

        topic_writes_total.labels(operation="edit").inc()
        logger.info("topic_edited", topic_id=topic_id, categories=len(categories), tags=len(tags))
        self._invalidate()

    def _resolve_links(
        self,
        category_list: Optional[Sequence[int]],
        tag_list: Optional[Sequence[str]],
    ) -> Tuple[List[Category], List[Tag]]:
        category_ids = _distinct_categories(category_list)
        keywords = _distinct_keywords(tag_list)

        categories = []
        if category_ids:
            categories = list(self.session.exec(
                select(Category).where(Category.id.in_(category_ids))
            ).all())

        tags = []
        if keywords:
            tags = list(self.session.exec(select(Tag).where(Tag.keyword.in_(keywords))).all())

        known = {tag.keyword for tag in tags}
        for keyword in keywords:
            if keyword not in known:
                tag = Tag(keyword=keyword)
                self.session.add(tag)
                tags.append(tag)
                known.add(keyword)

        return categories, tags

    def _link(self, topic: Topic, categories: List[Category], tags: List[Tag]) -> None:
        # New topic and tag rows need their ids before the links can point at them
        self.session.flush()
        self.session.add_all([
            CategoryTopic(category_id=category.id, topic_id=topic.id) for category in categories
        ])
        self.session.add_all([
            TagTopic(tag_id=tag.id, topic_id=topic.id) for tag in tags
        ])

    def _invalidate(self) -> None:
        self.cache.invalidate(cache_keys.CATEGORIES, cache_keys.TAGS, cache_keys.MONTH_STATISTICS)
        self.cache.invalidate_prefix(cache_keys.RELATED_TOPICS)

    def _page(self, query: SelectOfScalar, page_index: int, page_size: int) -> PagedResult[TopicModel]:
        total = self.session.exec(select(func.count()).select_from(query.subquery())).one()

        topics = self.session.exec(
            query.order_by(Topic.edit_date.desc(), Topic.id.desc())
            .offset((page_index - 1) * page_size)
            .limit(page_size)
        ).all()

        return PagedResult[TopicModel](items=self._transform(topics), total=total)

    def query_not_trash(
        self,
        page_index: int,
        page_size: int,
        status: Optional[TopicStatus] = None,
        keywords: Optional[str] = None,
    ) -> PagedResult[TopicModel]:
        """Admin listing: every topic that is not in the trash"""
        query = select(Topic).where(Topic.status != TopicStatus.TRASH)

        if status is not None:
            query = query.where(Topic.status == status)
        if keywords and keywords.strip():
            query = query.where(Topic.title.contains(keywords))

        return self._page(query, page_index, page_size)

    def query_by_category(self, page_index: int, page_size: int, category_id: int) -> PagedResult[TopicModel]:
        topic_ids = select(CategoryTopic.topic_id).where(CategoryTopic.category_id == category_id)
        query = select(Topic).where(
            Topic.status == TopicStatus.PUBLISHED,
            Topic.id.in_(topic_ids)
        )
        return self._page(query, page_index, page_size)

    def query_by_tag(self, page_index: int, page_size: int, keyword: str) -> PagedResult[TopicModel]:
        topic_ids = (
            select(TagTopic.topic_id)
            .join(Tag, Tag.id == TagTopic.tag_id)
            .where(Tag.keyword == keyword)
        )
        query = select(Topic).where(
            Topic.status == TopicStatus.PUBLISHED,
            Topic.id.in_(topic_ids)
        )
        return self._page(query, page_index, page_size)

    def query_by_month(self, page_index: int, page_size: int, year: int, month: int) -> PagedResult[TopicModel]:
        start_date = datetime(year, month, 1, tzinfo=timezone.utc)
        if month == 12:
            end_date = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
        else:
            end_date = datetime(year, month + 1, 1, tzinfo=timezone.utc)

        query = select(Topic).where(
            Topic.status == TopicStatus.PUBLISHED,
            Topic.edit_date >= start_date,
            Topic.edit_date < end_date,
        )
        return self._page(query, page_index, page_size)

    def query_recent(self, count: int) -> List[TopicModel]:
        topics = self.session.exec(
            select(Topic)
            .where(Topic.status == TopicStatus.PUBLISHED)
            .order_by(Topic.edit_date.desc(), Topic.id.desc())
            .limit(count)
        ).all()
        return self._transform(topics)

    def get(self, topic_id: int) -> Optional[TopicModel]:
        topic = self.session.get(Topic, topic_id)
        if not topic:
            return None
        return self._transform([topic])[0]

    def get_prev(self, topic: TopicModel) -> Optional[TopicModel]:
        entity = self.session.exec(
            select(Topic)
            .where(Topic.status == TopicStatus.PUBLISHED, Topic.edit_date < topic.date)
            .order_by(Topic.edit_date.desc())
        ).first()
        return self._transform([entity])[0] if entity else None

    def get_next(self, topic: TopicModel) -> Optional[TopicModel]:
        entity = self.session.exec(
            select(Topic)
            .where(Topic.status == TopicStatus.PUBLISHED, Topic.edit_date > topic.date)
            .order_by(Topic.edit_date.asc())
        ).first()
        return self._transform([entity])[0] if entity else None

    def query_related(self, topic: TopicModel) -> List[TopicModel]:
        return self.cache.get_or_load(
            cache_keys.related_topics(topic.id),
            lambda: self._load_related(topic),
            _topic_list,
            expire=settings.CACHE_EXPIRE_TIME,
        )

    def _load_related(self, topic: TopicModel) -> List[TopicModel]:
        if not topic.tags and not topic.categories:
            return []

        query = select(Topic).where(Topic.status == TopicStatus.PUBLISHED, Topic.id != topic.id)
        if topic.tags:
            query = query.where(Topic.id.in_(
                select(TagTopic.topic_id)
                .join(Tag, Tag.id == TagTopic.tag_id)
                .where(Tag.keyword.in_(topic.tags))
            ))
        if topic.categories:
            query = query.where(Topic.id.in_(
                select(CategoryTopic.topic_id)
                .where(CategoryTopic.category_id.in_([c.id for c in topic.categories]))
            ))

        topics = self.session.exec(
            query.order_by(Topic.edit_date.desc(), Topic.id.desc()).limit(settings.RELATED_TOPIC_COUNT)
        ).all()
        return self._transform(topics)

    def query_month_statistics(self) -> List[MonthStatisticsModel]:
        return self.cache.get_or_load(
            cache_keys.MONTH_STATISTICS, self._load_month_statistics, _month_statistics_list
        )

    def _load_month_statistics(self) -> List[MonthStatisticsModel]:
        # Bucketed here so months follow UTC whatever the database session timezone is
        counts = {}
        for edit_date in self.session.exec(
            select(Topic.edit_date).where(Topic.status == TopicStatus.PUBLISHED)
        ).all():
            edit_date = as_utc(edit_date)
            key = (edit_date.year, edit_date.month)
            counts[key] = counts.get(key, 0) + 1
        return [
            MonthStatisticsModel(year=year, month=month, count=count)
            for (year, month), count in sorted(counts.items(), reverse=True)
        ]

    def batch_update_status(self, id_list: List[int], status: TopicStatus) -> None:
        if not id_list:
            return
        topics = self.session.exec(select(Topic).where(Topic.id.in_(id_list))).all()
        for topic in topics:
            topic.status = status
            self.session.add(topic)
        self.session.commit()

        topic_writes_total.labels(operation="status").inc()
        logger.info("topic_status_updated", id_list=id_list, status=status.name)
        self._invalidate()

    def _transform(self, topics: Sequence[Topic]) -> List[TopicModel]:
        """Build read models, loading links for the whole batch at once."""
        if not topics:
            return []

        ids = [topic.id for topic in topics]
        loaded = {
            topic.id: topic
            for topic in self.session.exec(
                select(Topic)
                .where(Topic.id.in_(ids))
                .options(selectinload(Topic.categories), selectinload(Topic.tags))
            ).all()
        }

        result = []
        for topic_id in ids:
            topic = loaded[topic_id]
            result.append(TopicModel(
                id=topic.id,
                title=topic.title,
                content=topic.content,
                alias=topic.alias,
                summary=topic.summary,
                status=topic.status,
                allow_comment=topic.allow_comment,
                date=topic.edit_date,
                create_date=topic.create_date,
                categories=[
                    TopicCategoryModel(id=c.id, name=c.name)
                    for c in sorted(topic.categories, key=lambda c: c.id)
                ],
                tags=[t.keyword for t in sorted(topic.tags, key=lambda t: t.id)],
            ))
        return result
