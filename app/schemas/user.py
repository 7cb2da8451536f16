from typing import Literal

from pydantic import BaseModel, Field
from datetime import datetime

class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=50, description="Login name")
    password: str = Field(..., min_length=8, max_length=72, description="Plain password (will be hashed). Minimum 8 characters.")
    role: Literal["ADMIN", "CASHIER"] = Field("CASHIER", description="ADMIN manages the catalog and reports")

class UserResponse(BaseModel):
    id: int
    username: str
    role: str
    created_at: datetime

    class Config:
        from_attributes = True

class SessionResponse(BaseModel):
    user_id: int
    username: str
    role: str
