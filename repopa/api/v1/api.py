"""
V1 API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from repopa.api.v1.endpoints import auth, dashboard, entes, governance, powers, regulatory, users

api_router = APIRouter()

# Auth (login, logout, current session)
api_router.include_router(auth.router)

# User administration
api_router.include_router(users.router)

# Registry records
api_router.include_router(entes.router)
api_router.include_router(governance.router)
api_router.include_router(powers.router)
api_router.include_router(regulatory.router)

# Dashboard
api_router.include_router(dashboard.router)
