"""
FastAPI dependencies (DB session, authentication)
"""
from fastapi import Request, HTTPException, status

from timetable.infrastructure.db.session import get_db as _get_db


# Re-export get_db for routers
get_db = _get_db


def require_user(request: Request) -> str:
    """
    Current username from the session cookie (for API endpoints)

    Raises:
        HTTPException(401): not logged in

    Usage:
        @router.get("/events")
        def list_events(user: str = Depends(require_user)):
            ...
    """
    user = request.session.get("user")
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated"
        )
    return user
