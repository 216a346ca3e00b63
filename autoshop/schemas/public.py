"""
Pydantic schemas for the public website.
"""
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from datetime import datetime
from typing import Optional
from autoshop.models.contact import ContactStatus
from autoshop.schemas.service import CatalogItem


class ServiceCategoryGroup(BaseModel):
    category: str
    services: list[CatalogItem]


class ContactCreate(BaseModel):
    name: str = Field(min_length=2)
    email: EmailStr
    phone: Optional[str] = None
    subject: Optional[str] = None
    message: str = Field(min_length=1)


class ContactMessage(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    subject: Optional[str] = None
    message: str
    status: ContactStatus
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BusinessInfo(BaseModel):
    name: str
    version: str
    business_hours: dict[str, str]
