"""
Pydantic models for the widget host API.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class CacheStatsResponse(BaseModel):
    """Fragment cache statistics."""

    cache_size: int = Field(..., description="Number of stored fragments")
    max_size: int = Field(..., description="Maximum number of fragments before eviction")
    utilization_percent: float
    hits: int
    misses: int
    writes: int
    hit_rate: float = Field(..., description="Hit percentage over all reads")
    evictions: int
    default_ttl: Optional[int] = Field(None, description="Fragment lifetime in seconds, None for no expiry")


class CacheEntryModel(BaseModel):
    """A stored fragment."""

    key: str
    key_parts: List[str] = Field(default_factory=list)
    content: str
    created_at: str
    last_accessed: str
    access_count: int
    ttl_seconds: Optional[int] = None
    expired: bool


class CacheClearResponse(BaseModel):
    """Result of removing fragments."""

    removed: int
    pattern: Optional[str] = None


class ErrorResponse(BaseModel):
    """Error payload returned for widget errors."""

    error_id: str
    category: str
    severity: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)
    recovery_suggestions: List[str] = Field(default_factory=list)
