import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel
from pydantic.config import ConfigDict


class ActivityCreateRequest(BaseModel):
    name: str
    description: Optional[str] = None


class ActivityUpdateRequest(BaseModel):
    name: str
    description: Optional[str] = None


class JoinRequest(BaseModel):
    pin: str


class Activity(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    pin: str
    owner_id: uuid.UUID
    created_at: datetime
    deleted: bool

    model_config = ConfigDict(from_attributes=True)


class ActivitiesList(BaseModel):
    items: List[Activity]
