# bootcamp_api/schemas/course.py
from typing import Literal, Optional

from pydantic import Field

from bootcamp_api.schemas.common import CamelModel

MinimumSkill = Literal["beginner", "intermediate", "advanced"]


class CourseCreate(CamelModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1, max_length=500)
    weeks: str = Field(..., min_length=1)
    tuition: float = Field(..., ge=0)
    minimum_skill: MinimumSkill
    scholarship_available: bool = False


class CourseUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    weeks: Optional[str] = Field(None, min_length=1)
    tuition: Optional[float] = Field(None, ge=0)
    minimum_skill: Optional[MinimumSkill] = None
    scholarship_available: Optional[bool] = None
