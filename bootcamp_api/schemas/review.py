# bootcamp_api/schemas/review.py
from typing import Optional

from pydantic import Field

from bootcamp_api.schemas.common import CamelModel


class ReviewCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=100)
    text: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=10)


class ReviewUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    text: Optional[str] = Field(None, min_length=1)
    rating: Optional[int] = Field(None, ge=1, le=10)
