from fastapi import HTTPException, Request, status


def require_instructor(request: Request) -> str:
    """Return the signed-in instructor's email, or reject with 401."""
    if not request.session.get("authenticated"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return request.session.get("email")
