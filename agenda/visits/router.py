from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from agenda.core.errors import failure_boundary
from agenda.database import get_db
from agenda.visits.schemas import VisitCreate, VisitListItem, VisitResponse, VisitUpdate
from agenda.visits.service import VisitService

router = APIRouter(prefix="/visits", tags=["visits"])


@router.get("", response_model=List[VisitListItem])
async def list_visits(db: AsyncSession = Depends(get_db)):
    service = VisitService(db)
    async with failure_boundary("Failed to fetch visits.", db):
        return await service.list_visits()


@router.post("", response_model=VisitResponse, status_code=status.HTTP_201_CREATED)
async def create_visit(visit: VisitCreate, db: AsyncSession = Depends(get_db)):
    service = VisitService(db)
    async with failure_boundary("Failed to create visit.", db):
        return await service.create_visit(visit)


@router.put("/{visit_id}", response_model=VisitResponse)
async def update_visit(visit_id: int, visit: VisitUpdate, db: AsyncSession = Depends(get_db)):
    service = VisitService(db)
    async with failure_boundary("Failed to update visit.", db):
        return await service.update_visit(visit_id, visit)


@router.delete("/{visit_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_visit(visit_id: int, db: AsyncSession = Depends(get_db)):
    service = VisitService(db)
    async with failure_boundary("Failed to delete visit.", db):
        await service.delete_visit(visit_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
