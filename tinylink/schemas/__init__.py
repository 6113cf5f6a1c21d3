# re-export common schemas for simpler imports
from .LinkRecord import LinkRecord
from .LinkCreateRequest import LinkCreateRequest
from .LinkInfoResponse import LinkInfoResponse, DeleteResponse

__all__ = [
    "LinkRecord",
    "LinkCreateRequest",
    "LinkInfoResponse",
    "DeleteResponse",
]
