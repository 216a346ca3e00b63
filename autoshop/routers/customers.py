"""
Customer routes.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from autoshop.auth import require_any_admin
from autoshop.database import get_db, reload, update_values
from autoshop.models.customer import Customer, CustomerStatus
from autoshop.models.service import ServiceRecord
from autoshop.models.user import User
from autoshop.models.vehicle import Vehicle
from autoshop.pagination import paginate
from autoshop.routers.vehicles import ensure_plate_available
from autoshop.schemas.common import Page
from autoshop.schemas.customer import Customer as CustomerSchema, CustomerCreate, CustomerUpdate, CustomerStats
from autoshop.schemas.service import ServiceRecord as ServiceRecordSchema, ServiceRecordCreate
from autoshop.schemas.vehicle import Vehicle as VehicleSchema, VehicleFields

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customers", tags=["customers"])

SORT_COLUMNS = {
    "created_at": Customer.created_at,
    "name": Customer.name,
    "email": Customer.email,
    "status": Customer.status,
}

SEARCH_COLUMNS = (
    Customer.name, Customer.email, Customer.business_name,
    Customer.street, Customer.city, Customer.state, Customer.zip_code,
)


async def get_customer_or_404(db: AsyncSession, customer_id: int) -> Customer:
    result = await db.execute(select(Customer).where(Customer.id == customer_id))
    customer = result.scalar_one_or_none()

    if not customer:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found"
        )
    return customer


@router.get("/", response_model=Page[CustomerSchema])
async def get_customers(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    status_filter: Optional[CustomerStatus] = Query(None, alias="status"),
    sort_by: str = "created_at",
    sort_order: str = "desc",
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Get customers with pagination, search, status filter and sorting.
    """
    query = select(Customer)

    if search:
        pattern = f"%{search}%"
        query = query.where(or_(*(column.ilike(pattern) for column in SEARCH_COLUMNS)))

    if status_filter:
        query = query.where(Customer.status == status_filter)

    column = SORT_COLUMNS.get(sort_by, Customer.created_at)
    if sort_order == "asc":
        query = query.order_by(column.asc(), Customer.id.asc())
    else:
        query = query.order_by(column.desc(), Customer.id.desc())

    return await paginate(db, query, page, limit)


@router.get("/stats/overview", response_model=CustomerStats)
async def get_customer_stats(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Customer totals by status and new customers this month.
    """
    result = await db.execute(select(Customer.status, func.count(Customer.id)).group_by(Customer.status))
    by_status = {customer_status.value: 0 for customer_status in CustomerStatus}
    for customer_status, count in result.all():
        by_status[customer_status.value] = count

    month_start = datetime.now(timezone.utc).replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    new_this_month = await db.scalar(
        select(func.count(Customer.id)).where(Customer.created_at >= month_start)
    )

    return CustomerStats(total=sum(by_status.values()), by_status=by_status, new_this_month=new_this_month or 0)


@router.get("/{customer_id}", response_model=CustomerSchema)
async def get_customer(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Get a specific customer by ID.
    """
    return await get_customer_or_404(db, customer_id)


@router.post("/", response_model=CustomerSchema, status_code=status.HTTP_201_CREATED)
async def create_customer(
    customer: CustomerCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Create a new customer.
    """
    email = customer.email.lower()
    result = await db.execute(select(Customer).where(Customer.email == email))
    if result.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Customer with this email already exists"
        )

    db_customer = Customer(**customer.model_dump(exclude={"email"}), email=email)
    db.add(db_customer)
    await db.commit()
    await db.refresh(db_customer)

    logger.info("Customer %s created by %s", db_customer.id, current_user.email)
    return db_customer


@router.put("/{customer_id}", response_model=CustomerSchema)
async def update_customer(
    customer_id: int,
    customer_update: CustomerUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Update a customer.
    """
    db_customer = await get_customer_or_404(db, customer_id)

    # Update only provided fields
    update_data = update_values(Customer, customer_update)

    if update_data.get("email"):
        update_data["email"] = update_data["email"].lower()
        if update_data["email"] != db_customer.email:
            result = await db.execute(select(Customer).where(Customer.email == update_data["email"]))
            if result.scalar_one_or_none():
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="Customer with this email already exists"
                )

    for field, value in update_data.items():
        setattr(db_customer, field, value)

    await db.commit()
    await db.refresh(db_customer)

    return db_customer


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Delete a customer together with their vehicles, appointments and history.
    """
    db_customer = await get_customer_or_404(db, customer_id)

    await db.delete(db_customer)
    await db.commit()

    logger.info("Customer %s deleted by %s", customer_id, current_user.email)
    return None


@router.get("/{customer_id}/vehicles", response_model=List[VehicleSchema])
async def get_customer_vehicles(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    await get_customer_or_404(db, customer_id)
    result = await db.execute(
        select(Vehicle).where(Vehicle.customer_id == customer_id).order_by(Vehicle.id)
    )
    return result.scalars().all()


@router.post("/{customer_id}/vehicles", response_model=VehicleSchema, status_code=status.HTTP_201_CREATED)
async def add_customer_vehicle(
    customer_id: int,
    vehicle: VehicleFields,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    await get_customer_or_404(db, customer_id)
    await ensure_plate_available(db, vehicle.license_plate)

    db_vehicle = Vehicle(**vehicle.model_dump(), customer_id=customer_id)
    db.add(db_vehicle)
    await db.commit()
    await db.refresh(db_vehicle)

    return db_vehicle


@router.get("/{customer_id}/service-history", response_model=List[ServiceRecordSchema])
async def get_customer_service_history(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    await get_customer_or_404(db, customer_id)
    result = await db.execute(
        select(ServiceRecord)
        .where(ServiceRecord.customer_id == customer_id)
        .order_by(ServiceRecord.service_date.desc(), ServiceRecord.id.desc())
    )
    return result.scalars().all()


@router.post(
    "/{customer_id}/service-history",
    response_model=ServiceRecordSchema,
    status_code=status.HTTP_201_CREATED,
)
async def add_service_record(
    customer_id: int,
    record: ServiceRecordCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Add an entry to a customer's service history.
    """
    await get_customer_or_404(db, customer_id)

    if record.vehicle_id is not None:
        result = await db.execute(
            select(Vehicle).where(Vehicle.id == record.vehicle_id, Vehicle.customer_id == customer_id)
        )
        if not result.scalar_one_or_none():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Vehicle does not belong to this customer"
            )

    db_record = ServiceRecord(**record.model_dump(), customer_id=customer_id)
    db.add(db_record)
    await db.commit()

    return await reload(db, ServiceRecord, db_record.id)
