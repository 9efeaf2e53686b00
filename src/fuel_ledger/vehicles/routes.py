import logging
from http import HTTPStatus
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from fastapi import APIRouter, Depends, Response
from src.fuel_ledger.database.dependencies import verify_database
from src.fuel_ledger.middleware.auth import validate_api_key
from src.fuel_ledger.vehicles.dependencies import get_vehicle_service
from src.fuel_ledger.vehicles.schemas import (
    VehicleCreate,
    VehicleResponse,
    VehicleUpdate,
)
from src.fuel_ledger.vehicles.services import VehicleService

logger = logging.getLogger(__name__)
vehicles_router = APIRouter(
    prefix="/vehicles",
    tags=["Vehicles"],
    dependencies=[Depends(validate_api_key)],
)


@vehicles_router.get("", response_model=List[VehicleResponse])
async def list_vehicles(
    db_session: AsyncSession = Depends(verify_database),
    service: VehicleService = Depends(get_vehicle_service),
):
    return await service.list_vehicles(db_session)


@vehicles_router.get("/{vehicle_id}", response_model=VehicleResponse)
async def get_vehicle(
    vehicle_id: str,
    db_session: AsyncSession = Depends(verify_database),
    service: VehicleService = Depends(get_vehicle_service),
):
    return await service.get_vehicle(db_session, vehicle_id)


@vehicles_router.post(
    "", response_model=VehicleResponse, status_code=HTTPStatus.CREATED
)
async def create_vehicle(
    payload: VehicleCreate,
    db_session: AsyncSession = Depends(verify_database),
    service: VehicleService = Depends(get_vehicle_service),
):
    logger.info(f"Register vehicle {payload.plate}")
    return await service.create_vehicle(db_session, payload)


@vehicles_router.put("/{vehicle_id}", response_model=VehicleResponse)
async def update_vehicle(
    vehicle_id: str,
    payload: VehicleUpdate,
    db_session: AsyncSession = Depends(verify_database),
    service: VehicleService = Depends(get_vehicle_service),
):
    return await service.update_vehicle(db_session, vehicle_id, payload)


@vehicles_router.delete("/{vehicle_id}", status_code=HTTPStatus.NO_CONTENT)
async def delete_vehicle(
    vehicle_id: str,
    db_session: AsyncSession = Depends(verify_database),
    service: VehicleService = Depends(get_vehicle_service),
):
    await service.delete_vehicle(db_session, vehicle_id)
    return Response(status_code=HTTPStatus.NO_CONTENT)
