"""News API request schemas"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError


class NewsPayload(BaseModel):
    """Fields accepted when creating or updating a news entry"""
    title: str = Field(..., min_length=5, max_length=190, description="News heading")
    body: str = Field(..., min_length=10, max_length=30000, description="News content")

    class Config:
        str_strip_whitespace = True
        extra = "ignore"


@dataclass
class SchemaResult:
    """Either a validated payload or a field -> message mapping, never both."""
    payload: Optional[NewsPayload] = None
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.payload is not None


def _field_name(loc) -> str:
    return ".".join(str(part) for part in loc) or "__root__"


def validate_news_payload(data: Mapping[str, Any]) -> SchemaResult:
    try:
        return SchemaResult(payload=NewsPayload.model_validate(dict(data)))
    except PydanticValidationError as e:
        errors: Dict[str, str] = {}
        for error in e.errors():
            # First message per field wins
            errors.setdefault(_field_name(error["loc"]), error["msg"])
        return SchemaResult(errors=errors)
