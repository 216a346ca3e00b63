"""
Pydantic schemas for Notification.
"""
from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional
from autoshop.models.notification import (
    NotificationType, NotificationPriority, NotificationChannel, NotificationStatus,
)


class NotificationCreate(BaseModel):
    customer_id: int
    type: NotificationType = NotificationType.GENERAL
    title: str
    message: str
    priority: NotificationPriority = NotificationPriority.MEDIUM
    channel: NotificationChannel = NotificationChannel.IN_APP


class Notification(BaseModel):
    id: int
    customer_id: int
    type: NotificationType
    title: str
    message: str
    priority: NotificationPriority
    channel: NotificationChannel
    status: NotificationStatus
    sent_at: Optional[datetime] = None
    read_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NotificationPage(BaseModel):
    items: list[Notification]
    unread_count: int
    total: int
    page: int
    limit: int
    pages: int
