import logging
from http import HTTPStatus
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fastapi import APIRouter, Depends, Response
from src.fuel_ledger.database.dependencies import verify_database
from src.fuel_ledger.middleware.auth import validate_api_key
from src.fuel_ledger.refuelings.dependencies import get_ledger_service
from src.fuel_ledger.refuelings.exceptions import RefuelingException
from src.fuel_ledger.refuelings.schemas import (
    RefuelingCreate,
    RefuelingFilter,
    RefuelingResponse,
    RefuelingUpdate,
)
from src.fuel_ledger.refuelings.services import LedgerService

logger = logging.getLogger(__name__)
refuelings_router = APIRouter(
    prefix="/refuelings",
    tags=["Refuelings"],
    dependencies=[Depends(validate_api_key)],
)


def _unexpected(action: str, e: Exception) -> RefuelingException:
    logger.error("Unexpected error while %s: %s", action, e, exc_info=True)
    return RefuelingException(
        status_code=HTTPStatus.INTERNAL_SERVER_ERROR, message=str(e)
    )


@refuelings_router.get("", response_model=List[RefuelingResponse])
async def list_refuelings(
    params: RefuelingFilter = Depends(),
    db_session: AsyncSession = Depends(verify_database),
    service: LedgerService = Depends(get_ledger_service),
):
    return await service.list(db_session, params)


@refuelings_router.get("/{refueling_id}", response_model=RefuelingResponse)
async def get_refueling(
    refueling_id: str,
    db_session: AsyncSession = Depends(verify_database),
    service: LedgerService = Depends(get_ledger_service),
):
    return await service.get(db_session, refueling_id)


@refuelings_router.post(
    "", response_model=RefuelingResponse, status_code=HTTPStatus.CREATED
)
async def create_refueling(
    payload: RefuelingCreate,
    db_session: AsyncSession = Depends(verify_database),
    service: LedgerService = Depends(get_ledger_service),
):
    logger.info(
        f"Create refueling for vehicle {payload.vehicle_id} "
        f"at odometer {payload.odometer}"
    )
    try:
        return await service.create(db_session, payload)
    except (RefuelingException, SQLAlchemyError):
        raise
    except Exception as e:
        raise _unexpected("creating refueling", e)


@refuelings_router.put("/{refueling_id}", response_model=RefuelingResponse)
async def update_refueling(
    refueling_id: str,
    payload: RefuelingUpdate,
    db_session: AsyncSession = Depends(verify_database),
    service: LedgerService = Depends(get_ledger_service),
):
    logger.info(f"Update refueling {refueling_id}")
    try:
        return await service.update(db_session, refueling_id, payload)
    except (RefuelingException, SQLAlchemyError):
        raise
    except Exception as e:
        raise _unexpected("updating refueling", e)


@refuelings_router.delete("/{refueling_id}", status_code=HTTPStatus.NO_CONTENT)
async def delete_refueling(
    refueling_id: str,
    db_session: AsyncSession = Depends(verify_database),
    service: LedgerService = Depends(get_ledger_service),
):
    logger.info(f"Delete refueling {refueling_id}")
    try:
        await service.delete(db_session, refueling_id)
    except (RefuelingException, SQLAlchemyError):
        raise
    except Exception as e:
        raise _unexpected("deleting refueling", e)
    return Response(status_code=HTTPStatus.NO_CONTENT)
