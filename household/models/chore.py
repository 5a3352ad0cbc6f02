"""
Chore Data Models

A chore is an (area, task) pair, e.g. ("Kitchen", "Mop").
Completions are logged one row at a time; everything else is derived.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Freshness(str, Enum):
    """How recently a chore was done, for the status grid."""
    RECENT = "recent"  # Within the configured window (7 days by default)
    STALE = "stale"    # Done before, but not recently
    NEVER = "never"    # No completion on record


class ChoreCompletion(BaseModel):
    """A single logged completion of a chore."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    area: str = Field(..., min_length=1, max_length=100)
    task: str = Field(..., min_length=1, max_length=100)
    completed_at: datetime = Field(
        default_factory=_utcnow,
        description="When the chore was done (timezone-aware)"
    )
    notes: Optional[str] = Field(default=None, max_length=500)
    created_at: datetime = Field(default_factory=_utcnow)

    @field_validator('completed_at', 'created_at')
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Naive timestamps are taken to be UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @field_validator('notes')
    @classmethod
    def empty_notes_to_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class ChorePriority(BaseModel):
    """A chore ranked by how long it has been neglected."""

    area: str
    task: str
    last_completed: Optional[datetime] = None
    days_ago: Optional[int] = Field(
        default=None,
        description="Whole days since last completion, None if never done"
    )

    @property
    def label(self) -> str:
        return f"{self.area} - {self.task}"

    @property
    def never_done(self) -> bool:
        return self.last_completed is None


class ChoreCell(BaseModel):
    """One cell of the last-cleaned status grid."""

    area: str
    task: str
    last_completed: Optional[datetime] = None
    freshness: Freshness
