from enum import Enum, IntEnum
from typing import Optional, Union

from pydantic import BaseModel, field_validator

from utils.errors import InvalidQuality


class Quality(IntEnum):
    FAIL = 0
    GOOD = 3
    EASY = 5


QUALITY_NAMES = {
    "fail": Quality.FAIL,
    "again": Quality.FAIL,
    "good": Quality.GOOD,
    "easy": Quality.EASY,
}


def parse_quality(value: Union[Quality, int, str]) -> Quality:
    """Map a rating (enum, 0/3/5, or fail/again/good/easy) to Quality."""
    if isinstance(value, Quality):
        return value
    if isinstance(value, bool):
        raise InvalidQuality(f"Invalid quality: {value!r}")
    if isinstance(value, int):
        try:
            return Quality(value)
        except ValueError:
            raise InvalidQuality(f"Quality must be 0, 3 or 5, got {value}") from None
    if isinstance(value, str):
        cleaned = value.strip().lower()
        if cleaned in QUALITY_NAMES:
            return QUALITY_NAMES[cleaned]
        if cleaned.isdigit():
            return parse_quality(int(cleaned))
    raise InvalidQuality(f"Invalid quality: {value!r}")


class SessionMode(str, Enum):
    STUDY = "study"
    PRACTICE = "practice"


class ReviewCreate(BaseModel):
    quality: Union[int, str]

    @field_validator("quality")
    @classmethod
    def validate_quality(cls, v):
        try:
            return int(parse_quality(v))
        except InvalidQuality as exc:
            raise ValueError(str(exc))


class SessionCreate(BaseModel):
    mode: SessionMode = SessionMode.STUDY
    persist: Optional[bool] = None
    shuffle: bool = False
