"""
Pydantic schemas for membership plans and customer memberships.
"""
from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import Optional
from autoshop.models.membership import (
    MembershipTier, BillingCycle, MembershipStatus,
    MembershipPaymentMethod, MembershipPaymentStatus,
)


class PlanBenefits(BaseModel):
    discount_percentage: float = Field(default=0, ge=0, le=100)
    priority_booking: bool = False
    free_inspections: int = Field(default=0, ge=0)
    roadside_assistance: bool = False
    extended_warranty: bool = False
    concierge_service: bool = False


class BenefitsUsed(BaseModel):
    inspections: int = 0
    roadside_assistance: int = 0
    priority_bookings: int = 0


class PlanBase(BaseModel):
    name: str
    description: Optional[str] = None
    tier: MembershipTier
    price: float = Field(ge=0)
    billing_cycle: BillingCycle = BillingCycle.MONTHLY
    features: list[str] = []
    benefits: PlanBenefits = PlanBenefits()
    max_vehicles: int = Field(default=1, ge=1)
    is_active: bool = True


class PlanCreate(PlanBase):
    pass


class PlanUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    tier: Optional[MembershipTier] = None
    price: Optional[float] = Field(default=None, ge=0)
    billing_cycle: Optional[BillingCycle] = None
    features: Optional[list[str]] = None
    benefits: Optional[PlanBenefits] = None
    max_vehicles: Optional[int] = Field(default=None, ge=1)
    is_active: Optional[bool] = None


class Plan(PlanBase):
    id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class MembershipCreate(BaseModel):
    plan_id: int
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    billing_cycle: Optional[BillingCycle] = None
    price: Optional[float] = Field(default=None, ge=0)
    payment_method: Optional[MembershipPaymentMethod] = None
    auto_renew: bool = True
    notes: Optional[str] = None


class MembershipUpdate(BaseModel):
    end_date: Optional[date] = None
    next_billing_date: Optional[date] = None
    price: Optional[float] = Field(default=None, ge=0)
    payment_method: Optional[MembershipPaymentMethod] = None
    payment_status: Optional[MembershipPaymentStatus] = None
    auto_renew: Optional[bool] = None
    total_paid: Optional[float] = Field(default=None, ge=0)
    benefits_used: Optional[BenefitsUsed] = None
    status: Optional[MembershipStatus] = None
    notes: Optional[str] = None


class MembershipCancel(BaseModel):
    cancellation_reason: Optional[str] = None


class Membership(BaseModel):
    id: int
    customer_id: int
    plan_id: int
    plan: Plan
    status: MembershipStatus
    start_date: date
    end_date: date
    next_billing_date: date
    billing_cycle: BillingCycle
    price: float
    auto_renew: bool
    payment_method: Optional[MembershipPaymentMethod] = None
    payment_status: MembershipPaymentStatus
    total_paid: float
    benefits_used: BenefitsUsed
    notes: Optional[str] = None
    cancellation_reason: Optional[str] = None
    cancellation_date: Optional[date] = None
    is_expired: bool
    days_until_renewal: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class MembershipStatusBreakdown(BaseModel):
    status: MembershipStatus
    count: int
    total_revenue: float


class MembershipStats(BaseModel):
    total_memberships: int
    active_memberships: int
    expiring_soon: int
    status_breakdown: list[MembershipStatusBreakdown]


class RewardsSummary(BaseModel):
    total_memberships: int = 0
    active_memberships: int = 0
    total_savings: float = 0.0
    total_benefits_used: int = 0
    next_renewal_date: Optional[date] = None
    available_discounts: float = 0.0


class Rewards(BaseModel):
    memberships: list[Membership]
    summary: RewardsSummary
    available_plans: list[Plan]
