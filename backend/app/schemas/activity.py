from datetime import datetime

from pydantic import BaseModel


class ActivityLogOut(BaseModel):
    id: str
    user_id: str | None
    action: str
    entity_type: str | None
    entity_id: str | None
    details: dict
    created_at: datetime

    model_config = {"from_attributes": True}


class AccessLogOut(BaseModel):
    id: str
    user_id: str | None
    email: str | None = None
    role: str | None = None
    login_time: datetime
    logout_time: datetime | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    is_successful: bool
