from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import PersistenceFault
from ..models.user import User


class UserRepository:
    def __init__(self, session: Session):
        self.session = session

    def create(self, name: str, email: str, image: str = None, api_token: str = None) -> User:
        user = User(name=name, email=email, image=image)
        if api_token:
            user.api_token = api_token
        try:
            self.session.add(user)
            self.session.commit()
            self.session.refresh(user)
            return user
        except SQLAlchemyError as e:
            self.session.rollback()
            raise PersistenceFault("Failed to create user", details={"error": str(e)}) from e

    def get_by_token(self, api_token: str) -> Optional[User]:
        try:
            return self.session.query(User).filter(User.api_token == api_token).first()
        except SQLAlchemyError as e:
            raise PersistenceFault("Failed to resolve user", details={"error": str(e)}) from e
