from typing import Optional

from fastapi import BackgroundTasks, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from ..config import get_settings
from ..core.database import get_db
from ..exceptions import AuthenticationError
from ..models.user import User
from ..news.transform import NewsApiTransform
from ..repositories.news_repository import NewsRepository
from ..repositories.user_repository import UserRepository
from ..services.file_namer import FileNamer
from ..services.file_store import ImageStore
from ..services.news_service import NewsService
from ..services.upload_validator import UploadValidator

security = HTTPBearer(auto_error=False)


def get_news_repository(db: Session = Depends(get_db)) -> NewsRepository:
    return NewsRepository(db)


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_image_store() -> ImageStore:
    return ImageStore(get_settings().image_dir)


def get_news_service(
    background_tasks: BackgroundTasks,
    news_repo: NewsRepository = Depends(get_news_repository),
    image_store: ImageStore = Depends(get_image_store),
) -> NewsService:
    settings = get_settings()
    return NewsService(
        news_repo=news_repo,
        image_store=image_store,
        transformer=NewsApiTransform.from_settings(settings),
        upload_validator=UploadValidator.from_settings(settings),
        file_namer=FileNamer(),
        defer=background_tasks.add_task,
    )


async def get_current_user(
    user_repo: UserRepository = Depends(get_user_repository),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> User:
    """Resolves the bearer API token to the requesting user."""
    if not credentials or not credentials.credentials:
        raise AuthenticationError()

    user = user_repo.get_by_token(credentials.credentials)
    if user is None:
        raise AuthenticationError()
    return user
