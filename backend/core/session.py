"""Shared-password session gate.

There are no user accounts: logging in with the shared password sets a
signed cookie holding a fixed value, and every ``/api/*`` route outside
AUTH_EXEMPT_PATHS requires that cookie.
"""
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from itsdangerous import BadSignature, Signer

SESSION_COOKIE_NAME = "ps_session"
SESSION_VALUE = "ok"
SESSION_MAX_AGE_SECONDS = 60 * 24 * 60 * 60  # 60 days

AUTH_EXEMPT_PATHS = frozenset({
    "/api/login",
    "/api/auth-check",
    "/api/health",
    "/api/db-health",
})


def _signer(secret: str) -> Signer:
    return Signer(secret, salt="prepperstore-session")


def sign_session(secret: str) -> str:
    return _signer(secret).sign(SESSION_VALUE).decode()


def is_valid_session(raw: str | None, secret: str) -> bool:
    if not raw:
        return False
    try:
        value = _signer(secret).unsign(raw)
    except BadSignature:
        return False
    return value.decode() == SESSION_VALUE


def is_authenticated(request: Request) -> bool:
    settings = request.app.state.settings
    return is_valid_session(request.cookies.get(SESSION_COOKIE_NAME), settings.cookie_secret)


def set_session_cookie(response: Response, request: Request):
    settings = request.app.state.settings
    response.set_cookie(
        SESSION_COOKIE_NAME,
        sign_session(settings.cookie_secret),
        max_age=SESSION_MAX_AGE_SECONDS,
        path="/",
        secure=settings.session_cookie_secure,
        httponly=True,
        samesite="lax",
    )


def clear_session_cookie(response: Response, request: Request):
    settings = request.app.state.settings
    response.delete_cookie(
        SESSION_COOKIE_NAME,
        path="/",
        secure=settings.session_cookie_secure,
        httponly=True,
        samesite="lax",
    )


async def session_gate(request: Request, call_next):
    path = request.url.path
    if path.startswith("/api/") and path not in AUTH_EXEMPT_PATHS and not is_authenticated(request):
        return JSONResponse(content={"error": "unauthorized"}, status_code=401)
    return await call_next(request)
