"""
Pydantic Schemas - Wire contract of the builder and dictionary services.

These models mirror the JSON bodies exchanged with the remote services.
The client never computes any of these fields itself: every snapshot is
taken verbatim from a response and replaced wholesale by the next one.

Wire snapshot:
    {answer, prefix_set, suffix_set, step, is_valid_word,
     valid_completions?, suggestion?}
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Enums
# =============================================================================

class Position(str, Enum):
    """Where a letter is attached to the answer."""
    PREFIX = "prefix"
    SUFFIX = "suffix"


# =============================================================================
# Builder state
# =============================================================================

class BuilderState(BaseModel):
    """Authoritative snapshot of a builder session."""
    answer: str = ""
    prefix_set: list[str] = Field(default_factory=list)
    suffix_set: list[str] = Field(default_factory=list)
    step: int = 0
    is_valid_word: bool = False
    valid_completions: Optional[list[str]] = None
    suggestion: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    def letter_set(self, position: Position) -> list[str]:
        """Letters currently insertable at the given end."""
        if position == Position.PREFIX:
            return self.prefix_set
        return self.suffix_set


# =============================================================================
# Requests
# =============================================================================

class AddLetterRequest(BaseModel):
    session_id: str
    letter: str
    position: Position


class RemoveLetterRequest(BaseModel):
    session_id: str
    index: int


class ResetRequest(BaseModel):
    session_id: str


# =============================================================================
# Responses
# =============================================================================

class InitResponse(BaseModel):
    """Response to POST /init."""
    session_id: str
    state: BuilderState
    success: bool = True


class StateResponse(BaseModel):
    """Response to GET /state."""
    state: BuilderState


class MutationResponse(BaseModel):
    """Response to POST /add, /remove and /reset."""
    success: bool = False
    state: Optional[BuilderState] = None
    message: Optional[str] = None


class ErrorBody(BaseModel):
    """Error payload returned with non-2xx statuses."""
    error: str


# =============================================================================
# Dictionary
# =============================================================================

UNAVAILABLE_MEANING = "Definition not available"


class WordDetails(BaseModel):
    """Supplementary information about a completed word."""
    pronunciation: str = ""
    audio: str = ""
    meaning: str = ""
    example: str = ""
    image_url: Optional[str] = Field(default=None, alias="imageUrl")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @classmethod
    def unavailable(cls) -> "WordDetails":
        """Placeholder used whenever a lookup fails."""
        return cls(meaning=UNAVAILABLE_MEANING)

    @property
    def is_available(self) -> bool:
        return self.meaning != UNAVAILABLE_MEANING


class ImageResponse(BaseModel):
    """Response to GET /image/{word}."""
    image_url: Optional[str] = Field(default=None, alias="imageUrl")

    model_config = ConfigDict(populate_by_name=True)
