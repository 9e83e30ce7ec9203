from typing import List

from fastapi import HTTPException
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from agenda.clients.models import Client
from agenda.visits.models import Visit
from agenda.visits.schemas import VisitCreate, VisitUpdate

CLIENT_NOT_FOUND_PLACEHOLDER = "Client not found"


class VisitService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_visit(self, visit_in: VisitCreate) -> Visit:
        visit = Visit(**visit_in.model_dump())
        self.db.add(visit)
        await self.db.commit()
        await self.db.refresh(visit)
        return visit

    async def list_visits(self) -> List[dict]:
        # The client name is joined in on every read instead of being copied onto the visit
        query = (
            select(Visit, Client.name)
            .outerjoin(Client, Visit.client_id == Client.id)
            .order_by(Visit.date.desc(), Visit.id.desc())
        )
        result = await self.db.execute(query)
        return [
            {**visit.__dict__, "client_name": client_name or CLIENT_NOT_FOUND_PLACEHOLDER}
            for visit, client_name in result.all()
        ]

    async def get_visit(self, visit_id: int) -> Visit:
        result = await self.db.execute(select(Visit).where(Visit.id == visit_id))
        visit = result.scalar_one_or_none()
        if not visit:
            raise HTTPException(status_code=404, detail="Visit not found")
        return visit

    async def update_visit(self, visit_id: int, visit_in: VisitUpdate) -> Visit:
        visit = await self.get_visit(visit_id)

        for field, value in visit_in.model_dump(exclude_unset=True).items():
            setattr(visit, field, value)

        await self.db.commit()
        await self.db.refresh(visit)
        return visit

    async def delete_visit(self, visit_id: int) -> None:
        await self.db.execute(delete(Visit).where(Visit.id == visit_id))
        await self.db.commit()
