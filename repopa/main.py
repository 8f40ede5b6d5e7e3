"""
REPOPA — Application entry point.

This is the **only** file that assembles the app.  All business logic
lives in the `api/`, `auth/`, `models/`, and `core/` packages.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from repopa.api.v1.api import api_router
from repopa.api.v1.endpoints.auth import limiter
from repopa.auth.roles import Role
from repopa.core.config import settings
from repopa.core.exceptions import register_exception_handlers
from repopa.core.security import get_password_hash
from repopa.db.base import Base
from repopa.db.session import async_session_factory, engine

# Ensure all models are imported so metadata.create_all can see them
from repopa.models.ente import Ente  # noqa: F401
from repopa.models.governance import GoverningBodyMember, Representative  # noqa: F401
from repopa.models.power import Attorney, Power  # noqa: F401
from repopa.models.regulatory import RegulatoryDocument  # noqa: F401
from repopa.models.user import RoleRecord, User
from repopa.repositories.credential_store import normalise_email

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


async def seed_roles(session: AsyncSession) -> dict[Role, int]:
    """Insert any missing role rows; return the id of every role."""
    result = await session.execute(select(RoleRecord))
    existing = {record.name: record for record in result.scalars().all()}
    for role in Role:
        if role.value not in existing:
            record = RoleRecord(name=role.value)
            session.add(record)
            existing[role.value] = record
            logger.info("Seeded role %s", role.value)
    await session.commit()
    return {role: existing[role.value].id for role in Role}


async def seed_first_admin(session: AsyncSession, role_ids: dict[Role, int]) -> None:
    email = normalise_email(settings.FIRST_ADMIN_EMAIL)
    result = await session.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none() is not None:
        return
    admin = User(
        full_name=settings.FIRST_ADMIN_NAME,
        email=email,
        password_hash=get_password_hash(settings.FIRST_ADMIN_PASSWORD),
        role_id=role_ids[Role.ADMINISTRATOR],
    )
    session.add(admin)
    await session.commit()
    logger.info(
        "Default admin created: %s (password: <redacted>)",
        email,
    )


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(_app: FastAPI):
    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")

    async with async_session_factory() as session:
        role_ids = await seed_roles(session)
        await seed_first_admin(session, role_ids)

    logger.info("REPOPA v%s started", settings.VERSION)
    yield
    await engine.dispose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    application = FastAPI(
        title="REPOPA",
        description="Registro Público de Organismos Públicos Auxiliares",
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # slowapi looks the limiter up on app state
    application.state.limiter = limiter

    # CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Global exception handlers (prevent stack-trace leakage)
    register_exception_handlers(application)

    # Mount API v1
    application.include_router(api_router, prefix=settings.API_V1_PREFIX)

    return application


app = create_app()
