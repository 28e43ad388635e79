from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class ProviderOut(BaseModel):
    provider: str
    provider_id: str


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    email: str
    name: str
    picture: Optional[str] = None
    providers: List[ProviderOut] = []
    created_at: Optional[datetime] = None


class AuthStatus(BaseModel):
    authenticated: bool
    user: Optional[UserOut] = None
