from pydantic import BaseModel
from typing import Optional

class Token(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"

class LoginRequest(BaseModel):
    email: str
    password: str

class LoginResponse(Token):
    is_first_login: bool

class RefreshTokenRequest(BaseModel):
    refresh_token: str
