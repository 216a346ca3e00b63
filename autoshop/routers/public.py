"""
Public website routes. No authentication.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from autoshop.config import get_settings
from autoshop.database import get_db
from autoshop.models.contact import ContactMessage
from autoshop.models.service import ServiceCatalogItem, ServiceCategory
from autoshop.schemas.public import BusinessInfo, ContactCreate, ContactMessage as ContactMessageSchema, ServiceCategoryGroup

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter(prefix="/public", tags=["public"])


@router.get("/services", response_model=List[ServiceCategoryGroup])
async def get_public_services(db: AsyncSession = Depends(get_db)):
    """
    Active catalog services grouped by category.
    """
    result = await db.execute(
        select(ServiceCatalogItem)
        .where(ServiceCatalogItem.is_active.is_(True))
        .order_by(ServiceCatalogItem.name)
    )
    items = result.scalars().all()

    groups = []
    for category in ServiceCategory:
        services = [item for item in items if item.category == category]
        if services:
            groups.append(ServiceCategoryGroup(category=category.value, services=services))
    return groups


@router.post("/contact", response_model=ContactMessageSchema, status_code=status.HTTP_201_CREATED)
async def submit_contact_form(form: ContactCreate, db: AsyncSession = Depends(get_db)):
    message = ContactMessage(**form.model_dump())
    db.add(message)
    await db.commit()
    await db.refresh(message)

    logger.info("Contact message %s received from %s", message.id, message.email)
    return message


@router.get("/business-info", response_model=BusinessInfo)
async def get_business_info():
    return BusinessInfo(
        name=settings.app_name,
        version=settings.app_version,
        business_hours=settings.business_hours,
    )
