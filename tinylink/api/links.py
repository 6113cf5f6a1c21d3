from fastapi import APIRouter, Depends, HTTPException, status
from typing import List
import logging

from tinylink.api.deps import get_registry
from tinylink.core.exceptions import CodeExhaustedError, CodeExistsError, CodeReservedError, LinkNotFoundError
from tinylink.schemas.LinkCreateRequest import LinkCreateRequest
from tinylink.schemas.LinkInfoResponse import DeleteResponse, LinkInfoResponse
from tinylink.services.registry import LinkRegistry
from tinylink.utils.encoding import is_valid_code

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/links", tags=["links"])


def _require_valid_code(code: str):
    if not is_valid_code(code):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid code format")


@router.post("", response_model=LinkInfoResponse, status_code=status.HTTP_201_CREATED)
def create_link_endpoint(link_request: LinkCreateRequest, registry: LinkRegistry = Depends(get_registry)):
    try:
        record = registry.create(link_request.target_url, link_request.code)
    except CodeExhaustedError as e:
        logger.error(f"Failed to allocate a code for {link_request.target_url[:50]}.. due to: {e}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="could not allocate a unique code")
    except CodeReservedError as e:
        logger.warning(f"Create 409: code is reserved: {e.code}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="code is reserved")
    except CodeExistsError as e:
        logger.warning(f"Create 409: code already exists: {e.code}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="code already exists")

    return LinkInfoResponse.from_record(record)


@router.get("", response_model=List[LinkInfoResponse])
def list_links_endpoint(registry: LinkRegistry = Depends(get_registry)):
    return [LinkInfoResponse.from_record(r) for r in registry.list()]


@router.get("/{code}", response_model=LinkInfoResponse)
def get_link_stats_endpoint(code: str, registry: LinkRegistry = Depends(get_registry)):
    _require_valid_code(code)
    try:
        record = registry.get(code)
    except LinkNotFoundError:
        logger.warning(f"Stats 404: code not found: {code}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="not found")
    return LinkInfoResponse.from_record(record)


@router.delete("/{code}", response_model=DeleteResponse)
def delete_link_endpoint(code: str, registry: LinkRegistry = Depends(get_registry)):
    _require_valid_code(code)
    try:
        registry.delete(code)
    except LinkNotFoundError:
        logger.warning(f"Delete 404: code not found: {code}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="not found")
    return DeleteResponse(ok=True)
