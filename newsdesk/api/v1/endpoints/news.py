from typing import Optional

import structlog
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import JSONResponse

from ...dependencies import get_current_user, get_news_service
from ....models.user import User
from ....news.schemas.responses import (
    ErrorResponse,
    NewsDetailResponse,
    NewsListResponse,
    NewsMutationResponse,
)
from ....services.file_store import UploadedFile
from ....services.news_service import ApiResponse, NewsService

logger = structlog.get_logger(__name__)

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _render(result: ApiResponse) -> JSONResponse:
    return JSONResponse(status_code=result.status_code, content=result.body)


def _to_uploaded_file(image: Optional[UploadFile]) -> Optional[UploadedFile]:
    # Browsers send an empty part when no file was picked
    if image is None or not image.filename:
        return None
    return UploadedFile.from_upload(image)


@router.get("", response_model=NewsListResponse, responses=ERROR_RESPONSES)
async def get_news(
    page: Optional[str] = Query(None, description="Page number, defaults to 1"),
    limit: Optional[str] = Query(None, description="Page size (1-100), defaults to 10"),
    news_service: NewsService = Depends(get_news_service),
):
    """List news entries, newest first"""
    return _render(await news_service.list_news(page, limit))


@router.post("", status_code=201, response_model=NewsMutationResponse, responses=ERROR_RESPONSES)
async def create_news(
    title: Optional[str] = Form(None),
    body: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    news_service: NewsService = Depends(get_news_service),
):
    """Create a news entry with an attached image"""
    form = {key: value for key, value in (("title", title), ("body", body)) if value is not None}
    return _render(await news_service.create_news(current_user, form, _to_uploaded_file(image)))


@router.get("/{news_id}", response_model=NewsDetailResponse, responses=ERROR_RESPONSES)
async def get_news_by_id(
    news_id: int,
    news_service: NewsService = Depends(get_news_service),
):
    return _render(await news_service.get_news(news_id))


@router.put("/{news_id}", response_model=NewsMutationResponse, responses=ERROR_RESPONSES)
async def update_news(
    news_id: int,
    title: Optional[str] = Form(None),
    body: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    news_service: NewsService = Depends(get_news_service),
):
    """Update a news entry. Only its owner may do this."""
    form = {key: value for key, value in (("title", title), ("body", body)) if value is not None}
    return _render(await news_service.update_news(current_user, news_id, form, _to_uploaded_file(image)))
