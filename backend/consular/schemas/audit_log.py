from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class AdminLogRead(BaseModel):
    id: int
    actor_id: int
    actor_type: str
    action: str

    details: Optional[str] = None
    resource_type: Optional[str] = None
    resource_id: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
