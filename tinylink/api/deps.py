from fastapi import Depends

from tinylink.db.base import LinkStorage
from tinylink.db.Connection import database
from tinylink.services.redirect import RedirectResolver
from tinylink.services.registry import LinkRegistry

# Top-level routes that match the code pattern and would shadow a redirect
RESERVED_CODES = frozenset({"healthz"})


def get_registry(storage: LinkStorage = Depends(database.get_storage)) -> LinkRegistry:
    return LinkRegistry(storage, reserved=RESERVED_CODES)


def get_resolver(storage: LinkStorage = Depends(database.get_storage)) -> RedirectResolver:
    return RedirectResolver(storage)
