from typing import List, Optional
from fastapi import APIRouter, HTTPException, Path, Query
import logging

from models import (
    TopicModel, TopicCreate, TopicUpdate, TopicStatus, TopicStatusUpdate,
    PagedResult, MonthStatisticsModel, BasicResponse, CreatedResponse,
)
from dependencies import TopicServiceDep
from core.config import get_settings

router = APIRouter()
settings = get_settings()
logger = logging.getLogger(__name__)


def _get_or_404(topics: TopicServiceDep, topic_id: int) -> TopicModel:
    topic = topics.get(topic_id)
    if topic is None:
        raise HTTPException(status_code=404, detail="Topic not found")
    return topic


@router.get("", response_model=PagedResult[TopicModel])
async def list_topics(
    topics: TopicServiceDep,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=settings.MAX_PAGE_SIZE),
    status: Optional[TopicStatus] = None,
    keywords: Optional[str] = None,
):
    """List every topic that is not in the trash"""
    return topics.query_not_trash(page, page_size, status, keywords)


@router.post("", response_model=CreatedResponse, status_code=201)
async def create_topic(topic: TopicCreate, topics: TopicServiceDep):
    """Create a topic with its categories and tags"""
    topic_id = topics.add(
        title=topic.title,
        content=topic.content,
        status=topic.status,
        category_list=topic.category_list,
        tag_list=topic.tag_list,
        alias=topic.alias,
        summary=topic.summary,
        date=topic.date,
        allow_comment=topic.allow_comment,
    )
    return CreatedResponse(id=topic_id)


@router.get("/recent", response_model=List[TopicModel])
async def recent_topics(
    topics: TopicServiceDep,
    count: int = Query(10, ge=1, le=settings.MAX_PAGE_SIZE),
):
    return topics.query_recent(count)


@router.get("/month-statistics", response_model=List[MonthStatisticsModel])
async def month_statistics(topics: TopicServiceDep):
    """Published topic counts per month, newest first"""
    return topics.query_month_statistics()


@router.post("/batch/status", response_model=BasicResponse)
async def batch_update_status(update: TopicStatusUpdate, topics: TopicServiceDep):
    topics.batch_update_status(update.id_list, update.status)
    return BasicResponse(message="Status updated successfully")


@router.get("/by-category/{category_id}", response_model=PagedResult[TopicModel])
async def topics_by_category(
    category_id: int,
    topics: TopicServiceDep,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=settings.MAX_PAGE_SIZE),
):
    return topics.query_by_category(page, page_size, category_id)


@router.get("/by-tag/{keyword}", response_model=PagedResult[TopicModel])
async def topics_by_tag(
    keyword: str,
    topics: TopicServiceDep,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=settings.MAX_PAGE_SIZE),
):
    return topics.query_by_tag(page, page_size, keyword)


@router.get("/by-month/{year}/{month}", response_model=PagedResult[TopicModel])
async def topics_by_month(
    topics: TopicServiceDep,
    year: int = Path(ge=1, le=9999),
    month: int = Path(ge=1, le=12),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=settings.MAX_PAGE_SIZE),
):
    return topics.query_by_month(page, page_size, year, month)


@router.get("/{topic_id}", response_model=TopicModel)
async def get_topic(topic_id: int, topics: TopicServiceDep):
    return _get_or_404(topics, topic_id)


@router.put("/{topic_id}", response_model=BasicResponse)
async def edit_topic(topic_id: int, topic: TopicUpdate, topics: TopicServiceDep):
    """Update a topic and replace its categories and tags"""
    topics.edit(
        topic_id,
        title=topic.title,
        content=topic.content,
        status=topic.status,
        category_list=topic.category_list,
        tag_list=topic.tag_list,
        alias=topic.alias,
        summary=topic.summary,
        date=topic.date,
        allow_comment=topic.allow_comment,
    )
    return BasicResponse(message="Topic saved successfully")


@router.get("/{topic_id}/prev", response_model=Optional[TopicModel])
async def previous_topic(topic_id: int, topics: TopicServiceDep):
    return topics.get_prev(_get_or_404(topics, topic_id))


@router.get("/{topic_id}/next", response_model=Optional[TopicModel])
async def next_topic(topic_id: int, topics: TopicServiceDep):
    return topics.get_next(_get_or_404(topics, topic_id))


@router.get("/{topic_id}/related", response_model=List[TopicModel])
async def related_topics(topic_id: int, topics: TopicServiceDep):
    """Published topics sharing tags and categories with this one"""
    return topics.query_related(_get_or_404(topics, topic_id))
