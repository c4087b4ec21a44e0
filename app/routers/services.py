from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from ..core.dependencies import get_current_admin, get_db
from ..schemas.service import BookableServiceResponse, ServiceCreate, ServiceResponse, ServiceUpdate
from ..services.catalog_service import catalog_service


router = APIRouter()
admin_only = Depends(get_current_admin)


@router.get("/", response_model=List[BookableServiceResponse])
async def list_services(db: AsyncSession = Depends(get_db)):
    """
    Services that can be booked, in display order.
    """
    return await catalog_service.list_bookable_services(db)


@router.post("/", dependencies=[admin_only], response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
async def create_service(data: ServiceCreate, db: AsyncSession = Depends(get_db)):
    return await catalog_service.create_service(data, db)


@router.patch("/{service_id}", dependencies=[admin_only], response_model=ServiceResponse)
async def update_service(
    data: ServiceUpdate,
    service_id: int = Path(..., description="ID of the service"),
    db: AsyncSession = Depends(get_db),
):
    return await catalog_service.update_service(service_id, data, db)
