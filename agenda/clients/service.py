from typing import List

from fastapi import HTTPException
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from agenda.clients.models import Client
from agenda.clients.schemas import ClientCreate, ClientUpdate


class ClientService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_client(self, client_in: ClientCreate) -> Client:
        db_client = Client(**client_in.model_dump(mode="json"))
        self.db.add(db_client)
        await self.db.commit()
        await self.db.refresh(db_client)
        return db_client

    async def list_clients(self) -> List[Client]:
        # Order follows the store's collation for ``name``
        query = select(Client).order_by(Client.name.asc(), Client.id.asc())
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_client(self, client_id: int) -> Client:
        query = select(Client).where(Client.id == client_id)
        result = await self.db.execute(query)
        client = result.scalar_one_or_none()
        if not client:
            raise HTTPException(status_code=404, detail="Client not found")
        return client

    async def update_client(self, client_id: int, client_in: ClientUpdate) -> Client:
        client = await self.get_client(client_id)

        update_data = client_in.model_dump(mode="json", exclude_unset=True)
        for field, value in update_data.items():
            setattr(client, field, value)

        await self.db.commit()
        await self.db.refresh(client)
        return client

    async def delete_client(self, client_id: int) -> None:
        # Visits go with the client through ON DELETE CASCADE
        await self.db.execute(delete(Client).where(Client.id == client_id))
        await self.db.commit()
