from typing import Annotated
from uuid import uuid4
import logging
from time import time

from fastapi import Depends, Request, status
from fastapi.responses import JSONResponse
from sqlmodel import Session, create_engine

from cache import LookupCache, get_lookup_cache
from core.config import get_settings
from services.category_service import CategoryService
from services.editor import TopicEditor
from services.exceptions import BlogServiceError
from services.tag_service import TagService
from services.topic_service import TopicService

settings = get_settings()
logger = logging.getLogger(__name__)
engine = create_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)

# Database dependency
def get_session():
    with Session(engine) as session:
        yield session

SessionDep = Annotated[Session, Depends(get_session)]
CacheDep = Annotated[LookupCache, Depends(get_lookup_cache)]

# Service dependencies
def get_tag_service(session: SessionDep, cache: CacheDep) -> TagService:
    return TagService(session, cache)

def get_category_service(session: SessionDep, cache: CacheDep) -> CategoryService:
    return CategoryService(session, cache)

def get_topic_service(session: SessionDep, cache: CacheDep) -> TopicService:
    return TopicService(session, cache)

TagServiceDep = Annotated[TagService, Depends(get_tag_service)]
CategoryServiceDep = Annotated[CategoryService, Depends(get_category_service)]
TopicServiceDep = Annotated[TopicService, Depends(get_topic_service)]

def get_topic_editor(topics: TopicServiceDep, categories: CategoryServiceDep) -> TopicEditor:
    return TopicEditor(topics, categories)

TopicEditorDep = Annotated[TopicEditor, Depends(get_topic_editor)]

# Middleware
async def log_requests(request: Request, call_next):
    start_time = time()
    response = await call_next(request)
    process_time = time() - start_time

    logger.info(
        f"Path: {request.url.path} | "
        f"Method: {request.method} | "
        f"Status: {response.status_code} | "
        f"Process Time: {process_time:.2f}s"
    )
    return response

# Error handlers
def setup_error_handlers(app):
    @app.exception_handler(BlogServiceError)
    async def service_exception_handler(request: Request, exc: BlogServiceError):
        logger.warning(
            f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}"
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        error_id = str(uuid4())
        logger.error(
            f"Unhandled error {error_id}: {str(exc)}",
            exc_info=True,
            extra={
                "path": request.url.path,
                "method": request.method,
                "error_id": error_id,
            },
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "An unexpected error occurred", "error_id": error_id},
        )
