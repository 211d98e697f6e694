import uuid
from datetime import datetime

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class UserRegisterRequest(BaseModel):
    display_name: str


class UserPublic(BaseModel):
    id: uuid.UUID
    display_name: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserWithCode(UserPublic):
    # Returned once at registration; this is the only login credential.
    access_code: str


class LoginRequest(BaseModel):
    access_code: str


class AccessToken(BaseModel):
    access_token: str
    token_type: str = Field(default="Bearer", json_schema_extra={"example": "Bearer"})
    expires_in: int
    user: UserPublic
