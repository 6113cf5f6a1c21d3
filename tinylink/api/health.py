from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from tinylink.core.config import settings
from tinylink.db.base import LinkStorage
from tinylink.db.Connection import database

router = APIRouter(tags=["health"])

# simple liveness
@router.get("/healthz")
def health():
    return {"ok": True, "version": settings.VERSION}

# readiness: can the storage backend be built and read
@router.get("/ready")
def readiness(storage: Optional[LinkStorage] = Depends(database.get_optional_storage)):
    if storage is None:
        return JSONResponse(
            status_code=503,
            content={"ready": False, "backend": database.settings.storage_backend},
        )
    ready = database.verify_storage_connection(storage)
    return JSONResponse(
        status_code=200 if ready else 503,
        content={"ready": ready, "backend": storage.name},
    )
