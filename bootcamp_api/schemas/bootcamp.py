# bootcamp_api/schemas/bootcamp.py
import re
from typing import List, Literal, Optional

from pydantic import EmailStr, Field, field_validator

from bootcamp_api.schemas.common import CamelModel

Career = Literal[
    "Mobile Development",
    "Web Development",
    "Data Science",
    "Business",
    "UI/UX",
    "Others",
]

URL_PATTERN = re.compile(
    r"https?://(www\.)?[-a-zA-Z0-9@:%._+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b([-a-zA-Z0-9()@:%_+.~#?&/=]*)"
)


def _check_website(value: Optional[str]) -> Optional[str]:
    if value is not None and not URL_PATTERN.fullmatch(value):
        raise ValueError("Please use a valid URL with HTTP or HTTPS")
    return value


class BootcampBase(CamelModel):
    website: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    housing: bool = False
    job_assistance: bool = False
    job_guarantee: bool = False
    accept_gi: bool = False

    @field_validator("website")
    @classmethod
    def check_website(cls, value: Optional[str]) -> Optional[str]:
        return _check_website(value)


class BootcampCreate(BootcampBase):
    name: str = Field(..., min_length=1, max_length=50)
    description: str = Field(..., min_length=1, max_length=500)
    address: str = Field(..., min_length=1)
    careers: List[Career] = Field(..., min_length=1)


class BootcampUpdate(CamelModel):
    """Every field optional; only the fields sent are written."""

    name: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    address: Optional[str] = Field(None, min_length=1)
    careers: Optional[List[Career]] = Field(None, min_length=1)
    website: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    housing: Optional[bool] = None
    job_assistance: Optional[bool] = None
    job_guarantee: Optional[bool] = None
    accept_gi: Optional[bool] = None

    @field_validator("website")
    @classmethod
    def check_website(cls, value: Optional[str]) -> Optional[str]:
        return _check_website(value)
