"""
Authentication routes (login, logout)
"""
import logging

from fastapi import APIRouter, Request, HTTPException
from pydantic import BaseModel

from timetable.auth import validate_credentials

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


class LoginRequest(BaseModel):
    username: str
    password: str


@router.post("/login")
def login(request: Request, req: LoginRequest):
    """Check the shared credentials and start a cookie session"""
    if not validate_credentials(req.username, req.password):
        logger.info("Failed login attempt for %r", req.username)
        raise HTTPException(status_code=401, detail="Invalid username or password")

    request.session["user"] = req.username
    return {"success": True}


@router.post("/logout")
def logout(request: Request):
    request.session.clear()
    return {"success": True}
