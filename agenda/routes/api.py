from fastapi import APIRouter

from agenda.clients.router import router as clients_router
from agenda.visits.router import router as visits_router

api_router = APIRouter()

api_router.include_router(clients_router)
api_router.include_router(visits_router)
