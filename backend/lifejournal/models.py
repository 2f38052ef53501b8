import datetime as dt
from typing import Any, Literal, Optional
from pydantic import BaseModel, Field

class CredentialIn(BaseModel):
    integration: str = Field(..., min_length=1, description="e.g. 'google_maps', 'amazon'")
    token: str = Field(..., min_length=1)
    tokenType: str = "access"

class CredentialStatusOut(BaseModel):
    success: bool = True
    integration: str
    hasCredential: bool

class TimelineEventIn(BaseModel):
    date: dt.date
    type: str = Field(..., min_length=1)
    source: str = Field(..., min_length=1, description="Integration the event came from")
    data: Any = Field(..., description="Event payload; sealed before it is stored")

class TimelineEventOut(BaseModel):
    id: str
    type: str
    timestamp: dt.date
    data: Any = None
    source: str

class TimelineOut(BaseModel):
    success: bool = True
    events: list[TimelineEventOut]
    count: int
    dateRange: Optional[dict[str, dt.date]] = None
    date: Optional[dt.date] = None

class CalendarEventIn(BaseModel):
    # title/date are checked by the handler so a missing one is a 400, not a 422
    title: Optional[str] = None
    date: Optional[dt.date] = None
    time: Optional[dt.time] = None
    type: Optional[str] = None

class ChatMessageIn(BaseModel):
    sessionId: str = Field(..., min_length=1)
    role: Literal["user", "coach"]
    content: Any = Field(..., description="Message body; sealed before it is stored")
