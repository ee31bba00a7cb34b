import secrets
from typing import Optional

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse

from core.session import clear_session_cookie, is_authenticated, set_session_cookie
from schemas.auth import LoginRequest

router = APIRouter()


@router.post("/login")
async def login(request: Request, response: Response, payload: Optional[LoginRequest] = None):
    expected = request.app.state.settings.app_password
    supplied = payload.password if payload is not None else None
    # An unset password locks everyone out
    if (
        not expected
        or not isinstance(supplied, str)
        or not secrets.compare_digest(supplied.encode(), expected.encode())
    ):
        return JSONResponse(content={"error": "invalid_credentials"}, status_code=status.HTTP_401_UNAUTHORIZED)

    set_session_cookie(response, request)
    return {"success": True}


@router.post("/logout")
async def logout(request: Request, response: Response):
    clear_session_cookie(response, request)
    return {"success": True}


@router.get("/auth-check")
async def auth_check(request: Request):
    if not is_authenticated(request):
        return JSONResponse(content={"authenticated": False}, status_code=status.HTTP_401_UNAUTHORIZED)
    return {"authenticated": True}
