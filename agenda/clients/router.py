from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from agenda.clients.schemas import ClientCreate, ClientResponse, ClientUpdate
from agenda.clients.service import ClientService
from agenda.core.errors import failure_boundary
from agenda.database import get_db

router = APIRouter(prefix="/clients", tags=["clients"])


@router.get("", response_model=List[ClientResponse])
async def list_clients(db: AsyncSession = Depends(get_db)):
    service = ClientService(db)
    async with failure_boundary("Failed to fetch clients.", db):
        return await service.list_clients()


@router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
async def create_client(client: ClientCreate, db: AsyncSession = Depends(get_db)):
    service = ClientService(db)
    async with failure_boundary("Failed to create client.", db):
        return await service.create_client(client)


@router.put("/{client_id}", response_model=ClientResponse)
async def update_client(client_id: int, client: ClientUpdate, db: AsyncSession = Depends(get_db)):
    service = ClientService(db)
    async with failure_boundary("Failed to update client.", db):
        return await service.update_client(client_id, client)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(client_id: int, db: AsyncSession = Depends(get_db)):
    service = ClientService(db)
    async with failure_boundary("Failed to delete client.", db):
        await service.delete_client(client_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
