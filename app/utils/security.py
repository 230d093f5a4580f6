"""
Admin authentication
"""

import logging
import secrets

from fastapi import HTTPException, Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.config import settings

logger = logging.getLogger(__name__)

security = HTTPBearer()

def verify_admin_token(credentials: HTTPAuthorizationCredentials = Depends(security)):
    """Only operators holding the admin token may edit or save matchings"""
    if not secrets.compare_digest(credentials.credentials, settings.ADMIN_TOKEN):
        logger.warning("Rejected request with invalid admin token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin token"
        )
    return credentials.credentials
