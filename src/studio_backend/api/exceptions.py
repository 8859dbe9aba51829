from fastapi import HTTPException, status
from typing import Any, Dict, Optional

class ForbiddenException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_403_FORBIDDEN
        self.detail = detail or "You do not have permission to perform this action."

class UnauthorizedException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_401_UNAUTHORIZED
        self.detail = detail or "Unauthenticated"

class RedirectException(HTTPException):
    def __init__(self, location: str, headers: Optional[Dict[str, str]] = None):
        self.headers = {**(headers or {}), "Location": location}
        self.status_code = status.HTTP_302_FOUND
        self.detail = f"Redirecting to {location}"
