from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Literal

UserTypeName = Literal["owner", "client"]

class UserBase(BaseModel):
    email: EmailStr
    firstName: str = ""
    lastName: str = ""
    phone: Optional[str] = None

class UserCreate(UserBase):
    password: str = Field(..., min_length=8)
    userType: UserTypeName = "client"
    salonName: Optional[str] = None  # Owners only; a salon is created with the account

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class UserResponse(BaseModel):
    id: str
    email: str
    firstName: str
    lastName: str
    phone: Optional[str] = None
    salonId: Optional[str] = None

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    userType: UserTypeName
    user: UserResponse

class SessionResponse(BaseModel):
    authenticated: bool
    userType: Optional[UserTypeName] = None
    user: Optional[UserResponse] = None

class GateResponse(BaseModel):
    outcome: Literal["render", "redirect", "loading", "blank"]
    path: Optional[str] = None
    replace: bool = False
    message: Optional[str] = None
    stale: bool = False

