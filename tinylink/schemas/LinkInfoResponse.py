from pydantic import BaseModel
from datetime import datetime
from typing import Optional

from tinylink.core.config import settings
from tinylink.schemas.LinkRecord import LinkRecord

# Response DTOs
class LinkInfoResponse(BaseModel):
    code: str
    target_url: str
    short_url: str
    total_clicks: int
    created_at: datetime
    last_clicked: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: LinkRecord) -> "LinkInfoResponse":
        return cls(
            code=record.code,
            target_url=record.target_url,
            short_url=f"{settings.BASE_URL.rstrip('/')}/{record.code}",
            total_clicks=record.total_clicks,
            created_at=record.created_at,
            last_clicked=record.last_clicked,
        )


class DeleteResponse(BaseModel):
    ok: bool = True
