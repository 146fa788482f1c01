from typing import Any, Dict, List, Optional, Set

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..exceptions import PersistenceFault
from ..models.news import News
from ..models.user import User

# SQL INTEGER / BIGINT range; larger identifiers cannot match a row
MAX_ID = 2 ** 63 - 1


def _with_owner():
    # Only the public projection of the owner is loaded
    return joinedload(News.user).load_only(*(getattr(User, name) for name in User.PUBLIC_FIELDS))


class NewsRepository:
    def __init__(self, session: Session):
        self.session = session

    def count(self) -> int:
        try:
            return self.session.query(func.count(News.id)).scalar() or 0
        except SQLAlchemyError as e:
            raise PersistenceFault("Failed to count news", details={"error": str(e)}) from e

    def list_page(self, skip: int, limit: int) -> List[News]:
        try:
            return (
                self.session.query(News)
                .options(_with_owner())
                .order_by(News.id.desc())
                .offset(skip)
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            raise PersistenceFault("Failed to list news", details={"error": str(e)}) from e

    def get(self, news_id: int) -> Optional[News]:
        if not 0 < news_id <= MAX_ID:
            return None
        try:
            return self.session.query(News).filter(News.id == news_id).first()
        except SQLAlchemyError as e:
            raise PersistenceFault("Failed to fetch news", details={"news_id": news_id, "error": str(e)}) from e

    def get_with_owner(self, news_id: int) -> Optional[News]:
        if not 0 < news_id <= MAX_ID:
            return None
        try:
            return (
                self.session.query(News)
                .options(_with_owner())
                .filter(News.id == news_id)
                .first()
            )
        except SQLAlchemyError as e:
            raise PersistenceFault("Failed to fetch news", details={"news_id": news_id, "error": str(e)}) from e

    def create(self, data: Dict[str, Any]) -> News:
        news = News(**data)
        try:
            self.session.add(news)
            self.session.commit()
            self.session.refresh(news)
            return news
        except SQLAlchemyError as e:
            self.session.rollback()
            raise PersistenceFault("Failed to create news", details={"error": str(e)}) from e

    def update(self, news: News, data: Dict[str, Any]) -> News:
        try:
            for key, value in data.items():
                setattr(news, key, value)
            self.session.commit()
            self.session.refresh(news)
            return news
        except SQLAlchemyError as e:
            self.session.rollback()
            raise PersistenceFault("Failed to update news", details={"news_id": news.id, "error": str(e)}) from e

    def referenced_images(self) -> Set[str]:
        try:
            return {row[0] for row in self.session.query(News.image).all()}
        except SQLAlchemyError as e:
            raise PersistenceFault("Failed to list referenced images", details={"error": str(e)}) from e
