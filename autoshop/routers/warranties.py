"""
Warranty routes.
"""
import logging
from datetime import date, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from autoshop.auth import require_any_admin
from autoshop.billing import money
from autoshop.database import get_db, update_values
from autoshop.errors import BusinessRuleError
from autoshop.models.customer import Customer
from autoshop.models.user import User
from autoshop.models.vehicle import Vehicle
from autoshop.models.warranty import Warranty, WarrantyStatus, WarrantyType
from autoshop.schemas.warranty import (
    MileageUpdate,
    Warranty as WarrantySchema,
    WarrantyClaim,
    WarrantyCreate,
    WarrantyStats,
    WarrantyStatusBreakdown,
    WarrantyTypeStats,
    WarrantyUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/warranties", tags=["warranties"])

EXPIRY_WINDOW_DAYS = 90
MILEAGE_WARNING_RATIO = 0.9


def check_period(start_date: date, end_date: date) -> None:
    if end_date <= start_date:
        raise BusinessRuleError("End date must be after start date")


def is_expiring_soon(warranty: Warranty, today: date) -> bool:
    return (
        warranty.status == WarrantyStatus.ACTIVE
        and today <= warranty.end_date <= today + timedelta(days=EXPIRY_WINDOW_DAYS)
    )


def is_near_mileage_limit(warranty: Warranty) -> bool:
    return (
        warranty.status == WarrantyStatus.ACTIVE
        and bool(warranty.mileage_limit)
        and warranty.current_mileage >= warranty.mileage_limit * MILEAGE_WARNING_RATIO
    )


def record_mileage(warranty: Warranty, mileage: int) -> None:
    """Store the odometer reading; going past the limit ends the warranty."""
    warranty.current_mileage = mileage
    if warranty.mileage_limit and mileage > warranty.mileage_limit and warranty.status == WarrantyStatus.ACTIVE:
        warranty.status = WarrantyStatus.EXPIRED
        logger.info("Warranty %s expired by mileage (%d > %d)", warranty.id, mileage, warranty.mileage_limit)


def record_claim(warranty: Warranty, amount: float) -> None:
    if warranty.status != WarrantyStatus.ACTIVE:
        raise BusinessRuleError("Warranty is not active")
    if warranty.max_claim_amount and amount > warranty.max_claim_amount:
        raise BusinessRuleError("Claim amount exceeds maximum claim amount")

    warranty.total_claims += 1
    warranty.total_claim_amount = money(warranty.total_claim_amount + amount)


async def get_warranty_or_404(db: AsyncSession, warranty_id: int) -> Warranty:
    warranty = await db.get(Warranty, warranty_id)
    if not warranty:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Warranty not found"
        )
    return warranty


@router.get("/", response_model=List[WarrantySchema])
async def get_warranties(
    skip: int = 0,
    limit: int = 100,
    status_filter: Optional[WarrantyStatus] = Query(None, alias="status"),
    warranty_type: Optional[WarrantyType] = None,
    customer_id: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    query = select(Warranty).order_by(Warranty.end_date, Warranty.id)
    if status_filter:
        query = query.where(Warranty.status == status_filter)
    if warranty_type:
        query = query.where(Warranty.warranty_type == warranty_type)
    if customer_id is not None:
        query = query.where(Warranty.customer_id == customer_id)

    result = await db.execute(query.offset(skip).limit(limit))
    return result.scalars().all()


@router.get("/stats/overview", response_model=WarrantyStats)
async def get_warranty_stats(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Totals, warranties expiring within 90 days and those near their mileage limit.
    """
    result = await db.execute(select(Warranty))
    warranties = result.scalars().all()
    today = date.today()

    breakdown = []
    for warranty_status in WarrantyStatus:
        matching = [w for w in warranties if w.status == warranty_status]
        if matching:
            breakdown.append(WarrantyStatusBreakdown(
                status=warranty_status,
                count=len(matching),
                total_claims=sum(w.total_claims for w in matching),
                total_claim_amount=money(sum(w.total_claim_amount for w in matching)),
            ))

    return WarrantyStats(
        total_warranties=len(warranties),
        active_warranties=sum(1 for w in warranties if w.status == WarrantyStatus.ACTIVE),
        expiring_soon=sum(1 for w in warranties if is_expiring_soon(w, today)),
        mileage_expiring=sum(1 for w in warranties if is_near_mileage_limit(w)),
        status_breakdown=breakdown,
    )


@router.get("/stats/by-type", response_model=List[WarrantyTypeStats])
async def get_warranty_type_stats(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    result = await db.execute(select(Warranty))
    warranties = result.scalars().all()

    stats = []
    for warranty_type in WarrantyType:
        matching = [w for w in warranties if w.warranty_type == warranty_type]
        if matching:
            stats.append(WarrantyTypeStats(
                warranty_type=warranty_type,
                count=len(matching),
                active_count=sum(1 for w in matching if w.status == WarrantyStatus.ACTIVE),
                total_claims=sum(w.total_claims for w in matching),
                total_claim_amount=money(sum(w.total_claim_amount for w in matching)),
            ))
    return sorted(stats, key=lambda s: s.count, reverse=True)


@router.get("/customer/{customer_id}", response_model=List[WarrantySchema])
async def get_customer_warranties(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    result = await db.execute(
        select(Warranty).where(Warranty.customer_id == customer_id).order_by(Warranty.end_date)
    )
    return result.scalars().all()


@router.get("/vehicle/{vehicle_id}", response_model=List[WarrantySchema])
async def get_vehicle_warranties(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    result = await db.execute(
        select(Warranty).where(Warranty.vehicle_id == vehicle_id).order_by(Warranty.end_date)
    )
    return result.scalars().all()


@router.get("/{warranty_id}", response_model=WarrantySchema)
async def get_warranty(
    warranty_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    return await get_warranty_or_404(db, warranty_id)


@router.post("/", response_model=WarrantySchema, status_code=status.HTTP_201_CREATED)
async def create_warranty(
    warranty: WarrantyCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    check_period(warranty.start_date, warranty.end_date)

    if await db.get(Customer, warranty.customer_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found"
        )
    vehicle = await db.get(Vehicle, warranty.vehicle_id)
    if vehicle is None or vehicle.customer_id != warranty.customer_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Vehicle does not belong to this customer"
        )

    db_warranty = Warranty(**warranty.model_dump())
    db.add(db_warranty)
    await db.commit()
    await db.refresh(db_warranty)

    logger.info("Warranty %s created for vehicle %s", db_warranty.id, vehicle.id)
    return db_warranty


@router.put("/{warranty_id}", response_model=WarrantySchema)
async def update_warranty(
    warranty_id: int,
    warranty_update: WarrantyUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    db_warranty = await get_warranty_or_404(db, warranty_id)

    update_data = update_values(Warranty, warranty_update)
    check_period(
        update_data.get("start_date") or db_warranty.start_date,
        update_data.get("end_date") or db_warranty.end_date,
    )

    for field, value in update_data.items():
        setattr(db_warranty, field, value)

    await db.commit()
    await db.refresh(db_warranty)

    return db_warranty


@router.delete("/{warranty_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_warranty(
    warranty_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    db_warranty = await get_warranty_or_404(db, warranty_id)
    if db_warranty.total_claims > 0:
        raise BusinessRuleError("Cannot delete warranty with existing claims")

    await db.delete(db_warranty)
    await db.commit()

    return None


@router.patch("/{warranty_id}/mileage", response_model=WarrantySchema)
async def update_warranty_mileage(
    warranty_id: int,
    body: MileageUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    db_warranty = await get_warranty_or_404(db, warranty_id)
    record_mileage(db_warranty, body.current_mileage)

    await db.commit()
    await db.refresh(db_warranty)

    return db_warranty


@router.patch("/{warranty_id}/claim", response_model=WarrantySchema)
async def add_warranty_claim(
    warranty_id: int,
    claim: WarrantyClaim,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Record a claim against an active warranty.
    """
    db_warranty = await get_warranty_or_404(db, warranty_id)
    record_claim(db_warranty, claim.claim_amount)

    await db.commit()
    await db.refresh(db_warranty)

    logger.info("Claim of %.2f recorded on warranty %s", claim.claim_amount, warranty_id)
    return db_warranty
