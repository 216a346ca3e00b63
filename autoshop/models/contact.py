"""
Contact form message model for database.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, Enum as SQLEnum
from sqlalchemy.sql import func
from autoshop.database import Base
import enum


class ContactStatus(str, enum.Enum):
    NEW = "new"
    HANDLED = "handled"


class ContactMessage(Base):
    """Enquiry submitted through the public website."""

    __tablename__ = "contact_messages"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    subject = Column(String, nullable=True)
    message = Column(Text, nullable=False)
    status = Column(SQLEnum(ContactStatus), default=ContactStatus.NEW, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
