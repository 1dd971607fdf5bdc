# foodshare/routers/pickups.py
from typing import List

from fastapi import APIRouter, Depends, status

from foodshare.deps import get_current_user, get_pickup_service
from foodshare.models import Pickup, User
from foodshare.schemas import PickupIn, StatusIn
from foodshare.services.pickups import PickupService

router = APIRouter(prefix="/api/food-pickups", tags=["pickups"])


@router.post("", response_model=Pickup, status_code=status.HTTP_201_CREATED)
async def create_pickup(
    body: PickupIn,
    user: User = Depends(get_current_user),
    pickups: PickupService = Depends(get_pickup_service),
):
    return await pickups.create(user, body)


@router.get("", response_model=List[Pickup], dependencies=[Depends(get_current_user)])
async def list_pickups(
    pickups: PickupService = Depends(get_pickup_service),
):
    return await pickups.list_all()


@router.get("/available", response_model=List[Pickup], dependencies=[Depends(get_current_user)])
async def list_available(
    pickups: PickupService = Depends(get_pickup_service),
):
    return await pickups.list_available()


@router.get("/volunteer", response_model=List[Pickup])
async def list_mine(
    user: User = Depends(get_current_user),
    pickups: PickupService = Depends(get_pickup_service),
):
    return await pickups.list_for_volunteer(user)


@router.get("/ngo/{ngo_id}", response_model=List[Pickup], dependencies=[Depends(get_current_user)])
async def list_for_ngo(
    ngo_id: int,
    pickups: PickupService = Depends(get_pickup_service),
):
    return await pickups.list_for_ngo(ngo_id)


@router.get("/{pickup_id}", response_model=Pickup, dependencies=[Depends(get_current_user)])
async def get_pickup(
    pickup_id: int,
    pickups: PickupService = Depends(get_pickup_service),
):
    return await pickups.get(pickup_id)


@router.post("/{pickup_id}/assign", response_model=Pickup)
async def assign_pickup(
    pickup_id: int,
    user: User = Depends(get_current_user),
    pickups: PickupService = Depends(get_pickup_service),
):
    return await pickups.assign(user, pickup_id)


@router.post("/{pickup_id}/status", response_model=Pickup)
async def update_status(
    pickup_id: int,
    body: StatusIn,
    user: User = Depends(get_current_user),
    pickups: PickupService = Depends(get_pickup_service),
):
    return await pickups.set_status(user, pickup_id, body.status)
