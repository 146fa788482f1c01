"""News API response schemas"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel


# ============================================================================
# Public resources
# ============================================================================

class ReporterResource(BaseModel):
    """Owner projection attached to a news entry"""
    id: int
    name: str
    email: str
    profile: Optional[str] = None  # profile image URL


class NewsResource(BaseModel):
    """Public shape of a news entry"""
    id: int
    heading: str
    news: str
    image: str  # image URL
    created_at: Optional[datetime] = None
    reporter: Optional[ReporterResource] = None


# ============================================================================
# Envelopes
# ============================================================================

class PaginationMetadata(BaseModel):
    totalPages: int
    current_page: int
    page_limit: int


class NewsListResponse(BaseModel):
    """Response for news list endpoint"""
    status: int
    news: List[NewsResource]
    metadata: PaginationMetadata


class NewsDetailResponse(BaseModel):
    status: int
    news: NewsResource


class NewsMutationResponse(BaseModel):
    status: int
    message: str
    news: NewsResource


class ErrorResponse(BaseModel):
    status: int
    message: Optional[str] = None
    errors: Optional[Dict[str, str]] = None
