from typing import Optional
from fastapi import APIRouter
import logging

from models import EditorAction, TopicEditorState, TopicSubmission, CreatedResponse, BasicResponse
from dependencies import TopicEditorDep, CacheDep

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/topics/editor", response_model=TopicEditorState)
async def new_topic_editor(editor: TopicEditorDep):
    """Editor state for a new, empty topic"""
    return editor.load()


@router.get("/topics/{topic_id}/editor", response_model=TopicEditorState)
async def topic_editor(topic_id: int, editor: TopicEditorDep):
    """Editor state for an existing topic"""
    return editor.load(topic_id)


@router.post("/topics/editor/{action}", response_model=CreatedResponse)
async def submit_topic_editor(
    action: EditorAction,
    submission: TopicSubmission,
    editor: TopicEditorDep,
    topic_id: Optional[int] = None,
):
    """Publish, unpublish or save the editor form"""
    return CreatedResponse(id=editor.submit(submission, action, topic_id))


@router.post("/cache/clear", response_model=BasicResponse)
async def clear_cache(cache: CacheDep):
    """Drop every cached lookup table"""
    removed = cache.clear()
    logger.info(f"Cache cleared: {removed} keys removed")
    return BasicResponse(message="Cache cleared successfully")
