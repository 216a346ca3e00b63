"""
Vehicle routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional

from autoshop.auth import require_any_admin
from autoshop.database import get_db, update_values
from autoshop.models.customer import Customer
from autoshop.models.vehicle import Vehicle
from autoshop.models.user import User
from autoshop.schemas.vehicle import Vehicle as VehicleSchema, VehicleCreate, VehicleUpdate

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


async def get_vehicle_or_404(db: AsyncSession, vehicle_id: int) -> Vehicle:
    result = await db.execute(select(Vehicle).where(Vehicle.id == vehicle_id))
    vehicle = result.scalar_one_or_none()

    if not vehicle:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vehicle not found"
        )
    return vehicle


async def ensure_plate_available(db: AsyncSession, license_plate: str, vehicle_id: Optional[int] = None) -> None:
    query = select(Vehicle).where(Vehicle.license_plate == license_plate)
    if vehicle_id is not None:
        query = query.where(Vehicle.id != vehicle_id)
    result = await db.execute(query)
    if result.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="License plate already registered"
        )


async def ensure_customer_exists(db: AsyncSession, customer_id: int) -> None:
    result = await db.execute(select(Customer.id).where(Customer.id == customer_id))
    if result.scalar_one_or_none() is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found"
        )


@router.get("/", response_model=List[VehicleSchema])
async def get_vehicles(
    skip: int = 0,
    limit: int = 100,
    customer_id: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Get all vehicles with pagination, optionally for one customer.
    """
    query = select(Vehicle).order_by(Vehicle.id)
    if customer_id is not None:
        query = query.where(Vehicle.customer_id == customer_id)

    result = await db.execute(query.offset(skip).limit(limit))
    vehicles = result.scalars().all()
    return vehicles


@router.get("/{vehicle_id}", response_model=VehicleSchema)
async def get_vehicle(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Get a specific vehicle by ID.
    """
    return await get_vehicle_or_404(db, vehicle_id)


@router.post("/", response_model=VehicleSchema, status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    vehicle: VehicleCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Create a new vehicle for an existing customer.
    """
    await ensure_customer_exists(db, vehicle.customer_id)
    await ensure_plate_available(db, vehicle.license_plate)

    db_vehicle = Vehicle(**vehicle.model_dump())
    db.add(db_vehicle)
    await db.commit()
    await db.refresh(db_vehicle)

    return db_vehicle


@router.put("/{vehicle_id}", response_model=VehicleSchema)
async def update_vehicle(
    vehicle_id: int,
    vehicle_update: VehicleUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Update a vehicle.
    """
    db_vehicle = await get_vehicle_or_404(db, vehicle_id)

    # Update only provided fields
    update_data = update_values(Vehicle, vehicle_update)
    if update_data.get("customer_id") is not None:
        await ensure_customer_exists(db, update_data["customer_id"])
    if update_data.get("license_plate"):
        await ensure_plate_available(db, update_data["license_plate"], vehicle_id)

    for field, value in update_data.items():
        setattr(db_vehicle, field, value)

    await db.commit()
    await db.refresh(db_vehicle)

    return db_vehicle


@router.delete("/{vehicle_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_vehicle(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_any_admin)
):
    """
    Delete a vehicle.
    """
    db_vehicle = await get_vehicle_or_404(db, vehicle_id)

    await db.delete(db_vehicle)
    await db.commit()

    return None
