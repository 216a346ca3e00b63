"""
Membership plan and customer membership models for database.
"""
from datetime import date

from sqlalchemy import Column, Integer, String, Float, Date, DateTime, ForeignKey, Text, Boolean, JSON, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from autoshop.database import Base
import enum


class MembershipTier(str, enum.Enum):
    BASIC = "basic"
    PREMIUM = "premium"
    VIP = "vip"
    ENTERPRISE = "enterprise"


class BillingCycle(str, enum.Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class MembershipStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class MembershipPaymentMethod(str, enum.Enum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    BANK_TRANSFER = "bank_transfer"
    PAYPAL = "paypal"
    OTHER = "other"


class MembershipPaymentStatus(str, enum.Enum):
    PAID = "paid"
    PENDING = "pending"
    FAILED = "failed"
    OVERDUE = "overdue"


class MembershipPlan(Base):
    """Membership plan database model."""

    __tablename__ = "membership_plans"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, unique=True)
    description = Column(Text, nullable=True)
    tier = Column(SQLEnum(MembershipTier), nullable=False)
    price = Column(Float, nullable=False)
    billing_cycle = Column(SQLEnum(BillingCycle), default=BillingCycle.MONTHLY, nullable=False)
    features = Column(JSON, nullable=False, default=list)
    benefits = Column(JSON, nullable=False, default=dict)
    max_vehicles = Column(Integer, nullable=False, default=1)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    memberships = relationship("CustomerMembership", back_populates="plan", cascade="all, delete")


class CustomerMembership(Base):
    """A customer's subscription to a membership plan."""

    __tablename__ = "customer_memberships"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    plan_id = Column(Integer, ForeignKey("membership_plans.id", ondelete="RESTRICT"), nullable=False)
    status = Column(SQLEnum(MembershipStatus), default=MembershipStatus.ACTIVE, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    next_billing_date = Column(Date, nullable=False)
    billing_cycle = Column(SQLEnum(BillingCycle), nullable=False)
    price = Column(Float, nullable=False)
    auto_renew = Column(Boolean, default=True, nullable=False)
    payment_method = Column(SQLEnum(MembershipPaymentMethod), nullable=True)
    payment_status = Column(SQLEnum(MembershipPaymentStatus), default=MembershipPaymentStatus.PENDING, nullable=False)
    total_paid = Column(Float, nullable=False, default=0.0)
    benefits_used = Column(JSON, nullable=False, default=dict)
    notes = Column(Text, nullable=True)
    cancellation_reason = Column(String, nullable=True)
    cancellation_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    customer = relationship("Customer", back_populates="memberships")
    plan = relationship("MembershipPlan", back_populates="memberships", lazy="joined")

    @property
    def is_expired(self) -> bool:
        return self.end_date < date.today()

    @property
    def days_until_renewal(self) -> int:
        return (self.next_billing_date - date.today()).days
