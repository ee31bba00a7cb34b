from typing import Any

from pydantic import BaseModel


class LoginRequest(BaseModel):
    # Any shape is accepted here; the login route rejects non-strings as bad credentials
    password: Any = None
