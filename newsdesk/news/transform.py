"""Maps stored News records to their public API shape."""

from typing import Any, Dict, Optional

from ..models.news import News
from .schemas.responses import NewsResource, ReporterResource

IMAGES_URL_PATH = "images"


class NewsApiTransform:
    def __init__(self, app_url: str, default_profile_image: Optional[str] = None):
        self.app_url = app_url.rstrip("/")
        self.default_profile_image = default_profile_image

    @classmethod
    def from_settings(cls, settings) -> "NewsApiTransform":
        return cls(settings.app_url, settings.default_profile_image)

    def image_url(self, stored_name: str) -> str:
        return f"{self.app_url}/{IMAGES_URL_PATH}/{stored_name}"

    def profile_url(self, image: Optional[str]) -> Optional[str]:
        if image:
            return self.image_url(image)
        return self.default_profile_image

    def transform(self, news: News) -> Dict[str, Any]:
        reporter = None
        if news.user is not None:
            reporter = ReporterResource(
                id=news.user.id,
                name=news.user.name,
                email=news.user.email,
                profile=self.profile_url(news.user.image),
            )

        resource = NewsResource(
            id=news.id,
            heading=news.title,
            news=news.body,
            image=self.image_url(news.image),
            created_at=news.created_at,
            reporter=reporter,
        )
        return resource.model_dump(mode="json")
