from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import RedirectResponse
import logging

from tinylink.api.deps import get_resolver
from tinylink.core.exceptions import LinkNotFoundError
from tinylink.services.redirect import RedirectResolver
from tinylink.utils.encoding import is_valid_code

logger = logging.getLogger(__name__)

router = APIRouter(tags=["redirect"])


@router.get("/{code}")
def redirect_to_url_endpoint(code: str, resolver: RedirectResolver = Depends(get_resolver)):
    """
    Follow a short code to its target, counting the visit.
    """
    if not is_valid_code(code):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    try:
        target_url = resolver.resolve(code)
    except LinkNotFoundError:
        logger.warning(f"Redirect 404: code not found: {code}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")

    return RedirectResponse(url=target_url, status_code=status.HTTP_302_FOUND)
