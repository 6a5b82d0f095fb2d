import logging
import secrets
from typing import Optional
from fastapi import Depends
from fastapi.security import APIKeyHeader
from app.config import settings
from app.services.errors import Unauthorized

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is reported as Unauthorized by us
admin_key_header = APIKeyHeader(name="X-Admin-Key", auto_error=False)

def is_valid_admin_key(key: Optional[str]) -> bool:
    if not key:
        return False
    return secrets.compare_digest(key.encode("utf-8"), settings.admin_key.encode("utf-8"))

def require_admin(key: Optional[str] = Depends(admin_key_header)):
    """Dependency guarding the admin routes."""
    if not is_valid_admin_key(key):
        logger.warning(f"Admin request rejected: key {'missing' if not key else 'invalid'}")
        raise Unauthorized("Admin key required")
