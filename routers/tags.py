from typing import List, Optional
from fastapi import APIRouter, HTTPException, Query
import logging

from models import TagModel, TagUpdate, PagedResult, IdList, BasicResponse
from dependencies import TagServiceDep
from core.config import get_settings

router = APIRouter()
settings = get_settings()
logger = logging.getLogger(__name__)


@router.get("", response_model=PagedResult[TagModel])
async def query_tags(
    tags: TagServiceDep,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=settings.MAX_PAGE_SIZE),
    keywords: Optional[str] = None,
):
    """Page through tags, optionally filtered by keyword"""
    return tags.query(page, page_size, keywords)


@router.get("/all", response_model=List[TagModel])
async def all_tags(tags: TagServiceDep):
    return tags.all()


@router.post("/batch/delete", response_model=BasicResponse)
async def delete_tags(ids: IdList, tags: TagServiceDep):
    tags.delete(ids.id_list)
    return BasicResponse(message="Tags deleted successfully")


@router.get("/{keyword}", response_model=TagModel)
async def get_tag(keyword: str, tags: TagServiceDep):
    tag = tags.get(keyword)
    if tag is None:
        raise HTTPException(status_code=404, detail="Tag not found")
    return tag


@router.put("/{tag_id}", response_model=BasicResponse)
async def edit_tag(tag_id: int, update: TagUpdate, tags: TagServiceDep):
    """Rename a tag"""
    tags.edit(tag_id, update.keyword)
    return BasicResponse(message="Tag saved successfully")
