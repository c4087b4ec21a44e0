from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from ..exceptions import NotFoundException
from ..models import Service
from ..schemas.service import ServiceCreate, ServiceUpdate


class CatalogService:
    """
    Service class for the repair services offered on the site.
    """

    async def list_bookable_services(self, db: AsyncSession) -> List[Service]:
        """
        Returns the services the booking widget may offer: visible and active,
        in their display order.
        """

        stmt = (
            select(Service)
            .where(Service.is_visible == True, Service.is_active == True)
            .order_by(Service.display_order.asc(), Service.id.asc())
        )
        result = await db.execute(stmt)
        return result.scalars().all()


    async def get_service(self, service_id: int, db: AsyncSession) -> Service:
        service = await db.get(Service, service_id)

        if not service:
            raise NotFoundException("Service not found")

        return service


    async def create_service(self, data: ServiceCreate, db: AsyncSession) -> Service:
        service = Service(**data.model_dump())

        db.add(service)
        await db.commit()
        await db.refresh(service)
        return service


    async def update_service(self, service_id: int, data: ServiceUpdate, db: AsyncSession) -> Service:
        service = await self.get_service(service_id, db)

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(service, field, value)

        await db.commit()
        await db.refresh(service)
        return service


catalog_service = CatalogService()
