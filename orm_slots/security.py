from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import List
import os
import secrets
from dotenv import load_dotenv

load_dotenv()

# SLOTS_API_KEY holds one key, or several comma separated ones while a key is rotated
API_KEY = os.getenv("SLOTS_API_KEY")

bearer_scheme = HTTPBearer(auto_error=False)


def get_api_keys() -> List[str]:
    if not API_KEY:
        return []
    return [key.strip() for key in API_KEY.split(",") if key.strip()]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def verify_api_key(credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme)):
    """
    Check the Bearer token against the configured slot API keys.
    With no key configured every slot route stays locked.
    """
    if not credentials:
        raise _unauthorized("Authorization header is required")

    token = credentials.credentials.encode()
    if not any(secrets.compare_digest(token, key.encode()) for key in get_api_keys()):
        raise _unauthorized("Invalid API key")

    return credentials.credentials
