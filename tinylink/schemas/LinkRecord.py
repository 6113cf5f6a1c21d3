from pydantic import BaseModel, ConfigDict, field_validator
from datetime import datetime, timezone
from typing import Optional

# Backend-neutral view of one stored link
class LinkRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: Optional[int] = None
    code: str
    target_url: str
    total_clicks: int = 0
    created_at: datetime
    last_clicked: Optional[datetime] = None

    @field_validator('created_at', 'last_clicked')
    def assume_utc(cls, v):
        # Timestamps without an offset (SQLite, older snapshots) are UTC
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v
