"""
News request pipeline.

Every operation runs the same phases in order (validate, authorize, mutate,
respond) and returns exactly one ApiResponse. Client errors are returned as
responses; StorageFault and PersistenceFault propagate to the application's
exception handler.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional

import structlog

from ..exceptions import (
    AuthorizationError,
    MissingResourceError,
    NewsdeskError,
    PersistenceFault,
    StorageFault,
    UploadError,
    ValidationError,
)
from ..models.user import User
from ..news.schemas.requests import validate_news_payload
from ..news.transform import NewsApiTransform
from ..repositories.news_repository import NewsRepository
from . import ownership, pagination
from .file_namer import FileNamer, extension_of
from .file_store import ImageStore, UploadedFile
from .upload_validator import UploadValidator

logger = structlog.get_logger(__name__)

IMAGE_REQUIRED_MESSAGE = "Image field is required."
FINALIZE_ATTEMPTS = 2


@dataclass
class ApiResponse:
    status_code: int
    body: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_error(cls, error: NewsdeskError) -> "ApiResponse":
        return cls(status_code=error.status_code, body=error.to_dict())


def _run_now(func: Callable, *args) -> None:
    func(*args)


class NewsService:
    def __init__(
        self,
        news_repo: NewsRepository,
        image_store: ImageStore,
        transformer: NewsApiTransform,
        upload_validator: UploadValidator,
        file_namer: Optional[FileNamer] = None,
        defer: Optional[Callable[..., None]] = None,
    ):
        self.news_repo = news_repo
        self.image_store = image_store
        self.transformer = transformer
        self.upload_validator = upload_validator
        self.file_namer = file_namer or FileNamer()
        # Schedules work that must not delay the response (e.g. removing superseded images)
        self.defer = defer or _run_now

    async def list_news(self, raw_page: Any = None, raw_limit: Any = None) -> ApiResponse:
        total = self.news_repo.count()
        window = pagination.compute(raw_page, raw_limit, total)

        items = self.news_repo.list_page(window.skip, window.limit)
        news = [self.transformer.transform(item) for item in items]

        return ApiResponse(200, {
            "status": 200,
            "news": news,
            "metadata": window.metadata(),
        })

    async def create_news(
        self,
        principal: User,
        form: Mapping[str, Any],
        image: Optional[UploadedFile],
    ) -> ApiResponse:
        result = validate_news_payload(form)
        if not result.ok:
            return ApiResponse.from_error(ValidationError(result.errors))

        if image is None:
            return ApiResponse.from_error(UploadError(IMAGE_REQUIRED_MESSAGE, field_level=False))

        upload_error = self._check_upload(image)
        if upload_error is not None:
            return ApiResponse.from_error(upload_error)

        stored_name = await self._stage(image)

        data = result.payload.model_dump()
        data["image"] = stored_name
        data["user_id"] = principal.id

        try:
            news = self.news_repo.create(data)
        except PersistenceFault:
            self.image_store.discard(stored_name)
            raise

        self._finalize(stored_name, news.id)
        logger.info("News created", news_id=news.id, user_id=principal.id, image=stored_name)

        return ApiResponse(201, {
            "status": 201,
            "message": "News entry created successfully.",
            "news": self.transformer.transform(news),
        })

    async def get_news(self, news_id: int) -> ApiResponse:
        news = self.news_repo.get_with_owner(news_id)
        if news is None:
            logger.info("News not found", news_id=news_id)
            return ApiResponse.from_error(MissingResourceError("News", news_id))

        return ApiResponse(200, {"status": 200, "news": self.transformer.transform(news)})

    async def update_news(
        self,
        principal: User,
        news_id: int,
        form: Mapping[str, Any],
        image: Optional[UploadedFile] = None,
    ) -> ApiResponse:
        news = self.news_repo.get(news_id)
        if news is None:
            return ApiResponse.from_error(MissingResourceError("News", news_id))

        if not ownership.authorize(principal.id, news.user_id):
            logger.warning("Rejected update by non-owner", news_id=news_id, user_id=principal.id)
            return ApiResponse.from_error(AuthorizationError())

        result = validate_news_payload(form)
        if not result.ok:
            return ApiResponse.from_error(ValidationError(result.errors))

        data = result.payload.model_dump()
        stored_name = None
        if image is not None:
            upload_error = self._check_upload(image)
            if upload_error is not None:
                return ApiResponse.from_error(upload_error)
            stored_name = await self._stage(image)
            data["image"] = stored_name

        previous_image = news.image
        try:
            news = self.news_repo.update(news, data)
        except PersistenceFault:
            if stored_name:
                self.image_store.discard(stored_name)
            raise

        if stored_name:
            self._finalize(stored_name, news.id)
            if previous_image and previous_image != stored_name:
                self.defer(self.image_store.remove, previous_image)

        logger.info("News updated", news_id=news.id, user_id=principal.id, image_replaced=bool(stored_name))

        return ApiResponse(200, {
            "status": 200,
            "message": "News updated successfully.",
            "news": self.transformer.transform(news),
        })

    def _check_upload(self, image: UploadedFile) -> Optional[UploadError]:
        message = self.upload_validator.validate(image.size, image.mime_type)
        if message is not None:
            return UploadError(message)
        message = self.upload_validator.validate_extension(image.mime_type, extension_of(image.original_name))
        if message is not None:
            return UploadError(message)
        return None

    async def _stage(self, image: UploadedFile) -> str:
        stored_name = self.file_namer.name_for(image)
        await self.image_store.stage(image, stored_name)
        return stored_name

    def _finalize(self, stored_name: str, news_id: int) -> None:
        error = None
        for attempt in range(1, FINALIZE_ATTEMPTS + 1):
            try:
                self.image_store.finalize(stored_name)
                return
            except StorageFault as e:
                error = e.details.get("error")
                logger.warning("Finalizing image failed", news_id=news_id, stored_name=stored_name, attempt=attempt, error=error)
        # The row is committed; the reconciliation sweep promotes the staged file later
        logger.error("Failed to finalize image", news_id=news_id, stored_name=stored_name, error=error)
