# app/api/v1/router.py
from fastapi import APIRouter

from app.api.v1.endpoints import (
    accounts,
    admin,
    auth,
    bins,
    dashboard,
    health,
    knowledge_base,
    permissions,
    settings,
    teams,
    tickets,
    user_management,
)

api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(tickets.router, prefix="/tickets", tags=["tickets"])
api_router.include_router(knowledge_base.router, prefix="/knowledge-base", tags=["knowledge-base"])
api_router.include_router(settings.router, prefix="/settings", tags=["settings"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
api_router.include_router(accounts.router, prefix="/accounts", tags=["accounts"])
api_router.include_router(bins.router, prefix="/bins", tags=["bins"])
api_router.include_router(teams.router, prefix="/teams", tags=["teams"])
api_router.include_router(user_management.router, prefix="/user-management", tags=["user-management"])
api_router.include_router(permissions.router, prefix="/permissions", tags=["permissions"])
