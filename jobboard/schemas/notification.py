from datetime import datetime
from typing import List

from pydantic import BaseModel


class NotificationItem(BaseModel):
    id: str
    icon: str
    color: str
    title: str
    message: str
    time: datetime
    unread: bool


class NotificationFeed(BaseModel):
    count: int
    unread_count: int
    data: List[NotificationItem]
