import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3


class CardBase(BaseModel):
    front: str
    back: str

    @field_validator("front", "back")
    @classmethod
    def validate_text(cls, v: str) -> str:
        cleaned = v.strip()
        if not cleaned:
            raise ValueError("Card text cannot be blank")
        return cleaned


class CardCreate(CardBase):
    pass


class CardUpdate(CardBase):
    pass


class Card(CardBase):
    """A learning item plus its scheduling state.

    Cards are immutable values; the policy engine returns new copies.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    interval: int = Field(default=0, ge=0)
    ease_factor: float = Field(default=DEFAULT_EASE_FACTOR, ge=MIN_EASE_FACTOR)
    repetitions: int = Field(default=0, ge=0)
    due_at: datetime
    last_reviewed_at: Optional[datetime] = None
    created_at: datetime


def new_card(front: str, back: str, now: datetime) -> Card:
    """Create a card with default scheduling state, due immediately."""
    return Card(
        id=uuid.uuid4().hex,
        front=front,
        back=back,
        interval=0,
        ease_factor=DEFAULT_EASE_FACTOR,
        repetitions=0,
        due_at=now,
        last_reviewed_at=None,
        created_at=now,
    )
