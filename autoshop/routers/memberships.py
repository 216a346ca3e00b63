"""
Membership plan and customer membership routes.
"""
import logging
from datetime import date, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from autoshop.auth import require_any_admin
from autoshop.billing import CYCLE_MONTHS, add_months, money, next_billing_date
from autoshop.database import get_db, reload, update_values
from autoshop.errors import BusinessRuleError, ConflictError
from autoshop.models.customer import Customer
from autoshop.models.membership import CustomerMembership, MembershipPlan, MembershipStatus
from autoshop.models.user import User
from autoshop.schemas.membership import (
    BenefitsUsed,
    Membership as MembershipSchema,
    MembershipCancel,
    MembershipCreate,
    MembershipStats,
    MembershipStatusBreakdown,
    MembershipUpdate,
    Plan as PlanSchema,
    PlanCreate,
    PlanUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/memberships", tags=["memberships"])

EXPIRY_WINDOW_DAYS = 30
RENEWABLE_FROM = (MembershipStatus.CANCELLED, MembershipStatus.EXPIRED)


def renew(membership: CustomerMembership, today: date) -> None:
    """
    Extend by one billing cycle, reactivating a cancelled or expired membership.

    A lapsed membership restarts from today rather than from its old end date.
    """
    months = CYCLE_MONTHS[membership.billing_cycle]
    membership.end_date = add_months(max(membership.end_date, today), months)
    membership.next_billing_date = add_months(max(membership.next_billing_date, today), months)
    if membership.status in RENEWABLE_FROM:
        membership.status = MembershipStatus.ACTIVE
        membership.cancellation_reason = None
        membership.cancellation_date = None


async def ensure_single_active(db: AsyncSession, customer_id: int, plan_id: int, membership_id: Optional[int] = None):
    query = select(CustomerMembership.id).where(
        CustomerMembership.customer_id == customer_id,
        CustomerMembership.plan_id == plan_id,
        CustomerMembership.status == MembershipStatus.ACTIVE,
    )
    if membership_id is not None:
        query = query.where(CustomerMembership.id != membership_id)
    result = await db.execute(query)
    if result.first() is not None:
        raise ConflictError("Customer already has an active membership on this plan")


async def get_plan_or_404(db: AsyncSession, plan_id: int) -> MembershipPlan:
    plan = await db.get(MembershipPlan, plan_id)
    if not plan:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Membership plan not found"
        )
    return plan


async def get_membership_or_404(db: AsyncSession, membership_id: int) -> CustomerMembership:
    membership = await db.get(CustomerMembership, membership_id)
    if not membership:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Membership not found"
        )
    return membership


# Plans

@router.get("/plans", response_model=List[PlanSchema])
async def get_plans(
    active_only: bool = False,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    query = select(MembershipPlan).order_by(MembershipPlan.price, MembershipPlan.id)
    if active_only:
        query = query.where(MembershipPlan.is_active.is_(True))
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/plans/{plan_id}", response_model=PlanSchema)
async def get_plan(
    plan_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    return await get_plan_or_404(db, plan_id)


@router.post("/plans", response_model=PlanSchema, status_code=status.HTTP_201_CREATED)
async def create_plan(
    plan: PlanCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    result = await db.execute(select(MembershipPlan.id).where(MembershipPlan.name == plan.name))
    if result.scalar_one_or_none() is not None:
        raise ConflictError("A plan with this name already exists")

    db_plan = MembershipPlan(**plan.model_dump())
    db.add(db_plan)
    await db.commit()
    await db.refresh(db_plan)

    return db_plan


@router.put("/plans/{plan_id}", response_model=PlanSchema)
async def update_plan(
    plan_id: int,
    plan_update: PlanUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    db_plan = await get_plan_or_404(db, plan_id)

    for field, value in update_values(MembershipPlan, plan_update).items():
        setattr(db_plan, field, value)

    await db.commit()
    await db.refresh(db_plan)

    return db_plan


@router.delete("/plans/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_plan(
    plan_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    db_plan = await get_plan_or_404(db, plan_id)

    result = await db.execute(
        select(CustomerMembership.id).where(
            CustomerMembership.plan_id == plan_id,
            CustomerMembership.status == MembershipStatus.ACTIVE,
        )
    )
    if result.first() is not None:
        raise ConflictError("Cannot delete plan with active memberships")

    await db.delete(db_plan)
    await db.commit()

    return None


# Customer memberships

@router.get("/stats", response_model=MembershipStats)
async def get_membership_stats(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    result = await db.execute(select(CustomerMembership))
    memberships = result.scalars().all()
    horizon = date.today() + timedelta(days=EXPIRY_WINDOW_DAYS)

    breakdown = []
    for membership_status in MembershipStatus:
        matching = [m for m in memberships if m.status == membership_status]
        if matching:
            breakdown.append(MembershipStatusBreakdown(
                status=membership_status,
                count=len(matching),
                total_revenue=money(sum(m.total_paid for m in matching)),
            ))

    return MembershipStats(
        total_memberships=len(memberships),
        active_memberships=sum(1 for m in memberships if m.status == MembershipStatus.ACTIVE),
        expiring_soon=sum(
            1 for m in memberships
            if m.status == MembershipStatus.ACTIVE and date.today() <= m.end_date <= horizon
        ),
        status_breakdown=breakdown,
    )


@router.get("/customer/{customer_id}", response_model=List[MembershipSchema])
async def get_customer_memberships(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    result = await db.execute(
        select(CustomerMembership)
        .where(CustomerMembership.customer_id == customer_id)
        .order_by(CustomerMembership.start_date.desc(), CustomerMembership.id.desc())
    )
    return result.scalars().all()


@router.post(
    "/customer/{customer_id}",
    response_model=MembershipSchema,
    status_code=status.HTTP_201_CREATED,
)
async def subscribe_customer(
    customer_id: int,
    body: MembershipCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Subscribe a customer to a plan. Billing starts one cycle after the start date.
    """
    if await db.get(Customer, customer_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found"
        )
    plan = await get_plan_or_404(db, body.plan_id)
    if not plan.is_active:
        raise BusinessRuleError("Membership plan is not active")

    await ensure_single_active(db, customer_id, plan.id)

    start_date = body.start_date or date.today()
    cycle = body.billing_cycle or plan.billing_cycle
    next_billing = next_billing_date(start_date, cycle)
    end_date = body.end_date or next_billing
    if end_date <= start_date:
        raise BusinessRuleError("End date must be after start date")

    membership = CustomerMembership(
        customer_id=customer_id,
        plan_id=plan.id,
        status=MembershipStatus.ACTIVE,
        start_date=start_date,
        end_date=end_date,
        next_billing_date=next_billing,
        billing_cycle=cycle,
        price=body.price if body.price is not None else plan.price,
        auto_renew=body.auto_renew,
        payment_method=body.payment_method,
        benefits_used=BenefitsUsed().model_dump(),
        notes=body.notes,
    )
    db.add(membership)
    await db.commit()

    logger.info("Customer %s subscribed to plan %s", customer_id, plan.name)
    return await reload(db, CustomerMembership, membership.id)


@router.get("/{membership_id}", response_model=MembershipSchema)
async def get_membership(
    membership_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    return await get_membership_or_404(db, membership_id)


@router.put("/{membership_id}", response_model=MembershipSchema)
async def update_membership(
    membership_id: int,
    membership_update: MembershipUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    db_membership = await get_membership_or_404(db, membership_id)

    update_data = update_values(CustomerMembership, membership_update)
    if update_data.get("status") == MembershipStatus.ACTIVE and db_membership.status != MembershipStatus.ACTIVE:
        await ensure_single_active(db, db_membership.customer_id, db_membership.plan_id, membership_id)

    for field, value in update_data.items():
        setattr(db_membership, field, value)

    await db.commit()
    return await reload(db, CustomerMembership, membership_id)


@router.post("/{membership_id}/cancel", response_model=MembershipSchema)
async def cancel_membership(
    membership_id: int,
    body: MembershipCancel,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    db_membership = await get_membership_or_404(db, membership_id)
    if db_membership.status == MembershipStatus.CANCELLED:
        raise BusinessRuleError("Membership is already cancelled")

    db_membership.status = MembershipStatus.CANCELLED
    db_membership.cancellation_reason = body.cancellation_reason
    db_membership.cancellation_date = date.today()
    db_membership.auto_renew = False
    await db.commit()

    logger.info("Membership %s cancelled", membership_id)
    return await reload(db, CustomerMembership, membership_id)


@router.post("/{membership_id}/renew", response_model=MembershipSchema)
async def renew_membership(
    membership_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    db_membership = await get_membership_or_404(db, membership_id)
    if db_membership.status in RENEWABLE_FROM:
        await ensure_single_active(db, db_membership.customer_id, db_membership.plan_id, membership_id)

    renew(db_membership, date.today())
    await db.commit()

    logger.info("Membership %s renewed until %s", membership_id, db_membership.end_date)
    return await reload(db, CustomerMembership, membership_id)
