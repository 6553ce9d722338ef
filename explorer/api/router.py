from fastapi import APIRouter
from explorer.api.endpoints import session, query, catalog, export

api_router = APIRouter()

# Combine all sub-routers into one
api_router.include_router(session.router)
api_router.include_router(query.router)
api_router.include_router(catalog.router)
api_router.include_router(export.router)
