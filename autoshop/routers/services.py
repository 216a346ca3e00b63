"""
Service catalog and work order routes.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from autoshop.auth import require_any_admin
from autoshop.database import get_db, update_values
from autoshop.models.service import (
    ServiceCatalogItem, ServiceCategory, ServiceRecord, WorkOrder, WorkOrderStatus,
)
from autoshop.models.user import User
from autoshop.models.vehicle import Vehicle
from autoshop.schemas.service import (
    CatalogItem as CatalogItemSchema,
    CatalogItemCreate,
    CatalogItemUpdate,
    WorkOrder as WorkOrderSchema,
    WorkOrderCreate,
    WorkOrderStats,
    WorkOrderUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/services", tags=["services"])


async def record_completed_work(db: AsyncSession, order: WorkOrder) -> None:
    """Write the completed work order into the owner's service history, once."""
    existing = await db.execute(select(ServiceRecord.id).where(ServiceRecord.work_order_id == order.id))
    if existing.scalar_one_or_none() is not None:
        return

    vehicle = await db.get(Vehicle, order.vehicle_id)
    if vehicle is None:
        return

    completed = order.completed_date or datetime.now(timezone.utc)
    db.add(ServiceRecord(
        customer_id=vehicle.customer_id,
        vehicle_id=vehicle.id,
        work_order_id=order.id,
        service_type=order.service_type,
        description=order.description,
        service_date=completed.date(),
        mileage=order.mileage,
        total_cost=order.cost,
        technician=order.technician,
        notes=order.notes,
    ))
    logger.info("Work order %s added to service history of customer %s", order.id, vehicle.customer_id)


# Catalog

@router.get("/categories", response_model=List[str])
async def get_categories(current_user: User = Depends(require_any_admin)):
    return [category.value for category in ServiceCategory]


@router.get("/catalog", response_model=List[CatalogItemSchema])
async def get_catalog(
    category: Optional[ServiceCategory] = None,
    active_only: bool = False,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    query = select(ServiceCatalogItem).order_by(ServiceCatalogItem.name)
    if category:
        query = query.where(ServiceCatalogItem.category == category)
    if active_only:
        query = query.where(ServiceCatalogItem.is_active.is_(True))

    result = await db.execute(query)
    return result.scalars().all()


async def get_catalog_item_or_404(db: AsyncSession, item_id: int) -> ServiceCatalogItem:
    item = await db.get(ServiceCatalogItem, item_id)
    if not item:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Service not found"
        )
    return item


async def ensure_catalog_name_available(db: AsyncSession, name: str, item_id: Optional[int] = None) -> None:
    query = select(ServiceCatalogItem.id).where(ServiceCatalogItem.name == name)
    if item_id is not None:
        query = query.where(ServiceCatalogItem.id != item_id)
    result = await db.execute(query)
    if result.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A service with this name already exists"
        )


@router.get("/catalog/{item_id}", response_model=CatalogItemSchema)
async def get_catalog_item(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    return await get_catalog_item_or_404(db, item_id)


@router.post("/catalog", response_model=CatalogItemSchema, status_code=status.HTTP_201_CREATED)
async def create_catalog_item(
    item: CatalogItemCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    await ensure_catalog_name_available(db, item.name)

    db_item = ServiceCatalogItem(**item.model_dump())
    db.add(db_item)
    await db.commit()
    await db.refresh(db_item)

    return db_item


@router.put("/catalog/{item_id}", response_model=CatalogItemSchema)
async def update_catalog_item(
    item_id: int,
    item_update: CatalogItemUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    db_item = await get_catalog_item_or_404(db, item_id)

    update_data = update_values(ServiceCatalogItem, item_update)
    if update_data.get("name"):
        await ensure_catalog_name_available(db, update_data["name"], item_id)

    for field, value in update_data.items():
        setattr(db_item, field, value)

    await db.commit()
    await db.refresh(db_item)

    return db_item


@router.delete("/catalog/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_catalog_item(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    db_item = await get_catalog_item_or_404(db, item_id)

    await db.delete(db_item)
    await db.commit()

    return None


# Work orders

@router.get("/workorders", response_model=List[WorkOrderSchema])
async def get_work_orders(
    skip: int = 0,
    limit: int = 100,
    status_filter: Optional[WorkOrderStatus] = Query(None, alias="status"),
    vehicle_id: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Get all work orders with pagination and optional status filter.
    """
    query = select(WorkOrder).order_by(WorkOrder.id.desc())

    if status_filter:
        query = query.where(WorkOrder.status == status_filter)
    if vehicle_id is not None:
        query = query.where(WorkOrder.vehicle_id == vehicle_id)

    result = await db.execute(query.offset(skip).limit(limit))
    return result.scalars().all()


@router.get("/workorders/stats/overview", response_model=WorkOrderStats)
async def get_work_order_stats(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    result = await db.execute(select(WorkOrder.status, func.count(WorkOrder.id)).group_by(WorkOrder.status))
    by_status = {order_status.value: 0 for order_status in WorkOrderStatus}
    for order_status, count in result.all():
        by_status[order_status.value] = count

    revenue = await db.scalar(
        select(func.coalesce(func.sum(WorkOrder.cost), 0.0)).where(WorkOrder.status == WorkOrderStatus.COMPLETED)
    )

    return WorkOrderStats(
        total=sum(by_status.values()),
        by_status=by_status,
        completed_revenue=round(revenue or 0.0, 2),
    )


async def get_work_order_or_404(db: AsyncSession, order_id: int) -> WorkOrder:
    result = await db.execute(select(WorkOrder).where(WorkOrder.id == order_id))
    order = result.scalar_one_or_none()

    if not order:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Work order not found"
        )
    return order


async def ensure_vehicle_exists(db: AsyncSession, vehicle_id: int) -> None:
    if await db.get(Vehicle, vehicle_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vehicle not found"
        )


@router.get("/workorders/{order_id}", response_model=WorkOrderSchema)
async def get_work_order(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    return await get_work_order_or_404(db, order_id)


@router.post("/workorders", response_model=WorkOrderSchema, status_code=status.HTTP_201_CREATED)
async def create_work_order(
    order: WorkOrderCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Create a new work order.
    """
    await ensure_vehicle_exists(db, order.vehicle_id)

    db_order = WorkOrder(**order.model_dump())
    if db_order.status == WorkOrderStatus.COMPLETED:
        db_order.completed_date = datetime.now(timezone.utc)
    db.add(db_order)
    await db.flush()

    if db_order.status == WorkOrderStatus.COMPLETED:
        await record_completed_work(db, db_order)

    await db.commit()
    await db.refresh(db_order)

    return db_order


@router.put("/workorders/{order_id}", response_model=WorkOrderSchema)
async def update_work_order(
    order_id: int,
    order_update: WorkOrderUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Update a work order. Completing it records the work in the service history.
    """
    db_order = await get_work_order_or_404(db, order_id)

    # Update only provided fields
    update_data = update_values(WorkOrder, order_update)
    if update_data.get("vehicle_id") is not None:
        await ensure_vehicle_exists(db, update_data["vehicle_id"])

    completing = (
        update_data.get("status") == WorkOrderStatus.COMPLETED
        and db_order.status != WorkOrderStatus.COMPLETED
    )
    # Auto-set completed_date when status changes to completed
    if completing and not update_data.get("completed_date"):
        update_data["completed_date"] = datetime.now(timezone.utc)

    for field, value in update_data.items():
        setattr(db_order, field, value)

    if completing:
        await db.flush()
        await record_completed_work(db, db_order)
        logger.info("Work order %s completed", db_order.id)

    await db.commit()
    await db.refresh(db_order)

    return db_order


@router.delete("/workorders/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_work_order(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Delete a work order.
    """
    db_order = await get_work_order_or_404(db, order_id)

    await db.delete(db_order)
    await db.commit()

    return None
