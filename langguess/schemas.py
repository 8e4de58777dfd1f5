"""
Explicit validation & Pydantic models
- Defines the structure of API requests and responses.
- The target language is never part of a response while the session is PLAYING.
"""

from typing import Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

AttributeValue = Union[List[str], str, bool, int]


# 1. Idempotent "pick today's language" endpoint
class DailyPickOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    already_picked: bool = Field(..., alias="alreadyPicked", description="True if today's language existed before this call")
    language: str = Field(..., description="Today's language")


# 2. Read-only view of today's pick
class TodaysPickOut(BaseModel):
    language: Optional[str] = Field(None, description="Today's language, or null if nothing is picked yet")


# 3. One line of the session's terminal log
class FeedbackLineOut(BaseModel):
    text: str
    kind: Literal["command", "error", "success", "info", "warning"]


# 4. One scored attribute
class AttributeOut(BaseModel):
    value: AttributeValue = Field(..., description="Target's value (empty while hidden)")
    match: Literal["exact", "close", "wrong", "hidden"]
    direction: Optional[Literal["up", "down"]] = Field(None, description="Only for first appeared year")


# 5. Validates player's guess
class GuessRequest(BaseModel):
    guess: str = Field(..., max_length=100, description="Language name, case-insensitive")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"guess": "Rust"},
                {"guess": "javascript"},
            ]
        }
    }


# 6. Overall state of a session
class SessionState(BaseModel):
    session_id: str
    status: Literal["PLAYING", "WON", "LOST"]
    attempts: int = Field(..., description="Guesses used so far")
    attempts_left: int
    max_tries: int
    can_play: bool = Field(..., description="False when logged out, finished or already played today")
    locked: bool = Field(..., description="User already has a recorded try today")
    outcome_pending: bool = Field(False, description="Game over but the result is not saved yet; the next guess retries")
    attributes: Dict[str, AttributeOut]
    log: List[FeedbackLineOut]
    language: Optional[str] = Field(None, description="Target language, only once the game is over")


# 7. Result of a guess
class GuessResponse(BaseModel):
    status: Literal["PLAYING", "WON", "LOST"]
    attempts_left: int
    feedback: List[FeedbackLineOut] = Field(..., description="Lines added by this guess")
    attributes: Dict[str, AttributeOut]
    language: Optional[str] = Field(None, description="Target language, only once the game is over")
    note: Optional[str] = None


# 8. The caller's recorded try for today
class DailyTryOut(BaseModel):
    success: bool
    created_at: float = Field(..., description="Unix timestamp")


class TodaysTryOut(BaseModel):
    daily_try: Optional[DailyTryOut] = None
