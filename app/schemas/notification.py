from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class NotificationResponse(BaseModel):
    id: int
    type: str
    title: str
    message: str
    priority: str
    department: Optional[str] = None
    employee_id: Optional[int] = None
    data: Optional[Dict[str, Any]] = None
    read: bool
    notification_date: date
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int


class SweepResponse(BaseModel):
    message: str
    created: List[NotificationResponse]
