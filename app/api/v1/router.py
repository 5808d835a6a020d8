"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from app.api.v1 import flows, routes

api_router = APIRouter()

# Flow state per booking domain
api_router.include_router(flows.router, prefix="/flows", tags=["Flows"])

# Route guard and URL mapping
api_router.include_router(routes.router, prefix="/routes", tags=["Routes"])
