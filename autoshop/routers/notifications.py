"""
Notification routes for the admin dashboard.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from autoshop.auth import require_any_admin
from autoshop.database import get_db
from autoshop.models.customer import Customer
from autoshop.models.notification import (
    Notification, NotificationPriority, NotificationStatus, NotificationType, NotificationChannel,
)
from autoshop.models.user import User
from autoshop.schemas.notification import Notification as NotificationSchema, NotificationCreate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


def build_notification(
    customer_id: int,
    type: NotificationType,
    title: str,
    message: str,
    priority: NotificationPriority = NotificationPriority.MEDIUM,
    channel: NotificationChannel = NotificationChannel.IN_APP,
) -> Notification:
    """A notification marked as sent now. In-app delivery is the database row itself."""
    return Notification(
        customer_id=customer_id,
        type=type,
        title=title,
        message=message,
        priority=priority,
        channel=channel,
        status=NotificationStatus.SENT,
        sent_at=datetime.now(timezone.utc),
    )


@router.post("/", response_model=NotificationSchema, status_code=status.HTTP_201_CREATED)
async def send_notification(
    notification: NotificationCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Send a notification to a customer.
    """
    if await db.get(Customer, notification.customer_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found"
        )

    db_notification = build_notification(**notification.model_dump())
    db.add(db_notification)
    await db.commit()
    await db.refresh(db_notification)

    logger.info("Notification %s sent to customer %s", db_notification.id, notification.customer_id)
    return db_notification


@router.get("/", response_model=List[NotificationSchema])
async def get_notifications(
    skip: int = 0,
    limit: int = 100,
    customer_id: Optional[int] = None,
    type: Optional[NotificationType] = None,
    status_filter: Optional[NotificationStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    query = select(Notification).order_by(Notification.created_at.desc(), Notification.id.desc())
    if customer_id is not None:
        query = query.where(Notification.customer_id == customer_id)
    if type:
        query = query.where(Notification.type == type)
    if status_filter:
        query = query.where(Notification.status == status_filter)

    result = await db.execute(query.offset(skip).limit(limit))
    return result.scalars().all()


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    db_notification = await db.get(Notification, notification_id)
    if not db_notification:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found"
        )

    await db.delete(db_notification)
    await db.commit()

    return None
