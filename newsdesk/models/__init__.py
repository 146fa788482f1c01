from .news import News
from .user import User

__all__ = ["News", "User"]
