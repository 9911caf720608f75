"""API v1 router aggregation"""
from fastapi import APIRouter

from vesting_ledger.api.v1 import equity_classes, grants, claims, token, admin, events

api_router = APIRouter()

api_router.include_router(equity_classes.router, prefix="/equity-classes", tags=["Equity Classes"])
api_router.include_router(grants.router, prefix="/grants", tags=["Grants"])
api_router.include_router(claims.router, prefix="/claims", tags=["Claims"])
api_router.include_router(token.router, prefix="/token", tags=["Token"])
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
api_router.include_router(events.router, prefix="/events", tags=["Events"])
