"""Baseline security headers on every response.

No Content-Security-Policy: the API serves JSON only and the SPA sets its own.
"""
from fastapi import Request
from secure import (
    CrossOriginOpenerPolicy,
    ReferrerPolicy,
    Secure,
    StrictTransportSecurity,
    XContentTypeOptions,
    XFrameOptions,
)

HSTS_MAX_AGE_SECONDS = 180 * 24 * 60 * 60

secure_headers = Secure(
    hsts=StrictTransportSecurity().max_age(HSTS_MAX_AGE_SECONDS).include_subdomains(),
    xcto=XContentTypeOptions(),
    xfo=XFrameOptions().sameorigin(),
    referrer=ReferrerPolicy().no_referrer(),
    coop=CrossOriginOpenerPolicy().same_origin(),
)


async def security_headers(request: Request, call_next):
    response = await call_next(request)
    secure_headers.set_headers(response)
    return response
