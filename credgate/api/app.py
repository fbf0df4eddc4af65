"""
Application Factory
===================
Composition root: builds stores, engine, issuer and service from settings
and mounts them on a FastAPI app.

Usage:
    from credgate.api import create_app

    app = create_app()                     # Settings.from_env()
    app = create_app(container=container)  # pre-built (tests)
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional

from fastapi import FastAPI
import structlog

from credgate import __version__
from credgate.accounts.service import CredentialService
from credgate.config import Settings
from credgate.database import Database
from credgate.delivery import CodeSender, build_code_sender
from credgate.errors.http import install_error_handlers
from credgate.logging import RequestLoggingMiddleware, setup_logging
from credgate.otp import OtpEngine
from credgate.otp.engine import Clock
from credgate.password import PasswordPolicy
from credgate.stores import ChallengeStore, InMemoryChallengeStore, InMemoryUserStore, UserStore
from credgate.tokens import TokenIssuer

from .health import create_health_router
from .router import create_auth_router

logger = structlog.get_logger(__name__)


@dataclass
class Container:
    """Everything one running instance shares."""
    settings: Settings
    users: UserStore
    challenges: ChallengeStore
    sender: CodeSender
    otp: OtpEngine
    tokens: TokenIssuer
    service: CredentialService
    database: Optional[Database] = None

    async def close(self) -> None:
        await self.sender.close()
        if self.database is not None:
            await self.database.close()


def build_container(
    settings: Optional[Settings] = None,
    sender: Optional[CodeSender] = None,
    clock: Optional[Clock] = None,
) -> Container:
    """
    Wire the object graph for one instance.

    SQL stores are used when ``database_url`` is set, in-memory stores
    otherwise. No module-level singletons are created.
    """
    settings = settings or Settings.from_env()

    database = None
    if settings.database_url:
        from credgate.stores.sql import SqlChallengeStore, SqlUserStore

        database = Database(settings.database_url)
        users: UserStore = SqlUserStore(database)
        challenges: ChallengeStore = SqlChallengeStore(database)
    else:
        users = InMemoryUserStore()
        challenges = InMemoryChallengeStore()

    sender = sender or build_code_sender(settings.delivery)
    otp = OtpEngine(challenges, sender, settings.otp, clock=clock)
    tokens = TokenIssuer.from_config(settings.token)
    service = CredentialService(users, otp, tokens, PasswordPolicy())

    logger.info(
        "Credential service wired",
        store="sql" if database is not None else "memory",
        otp_ttl_minutes=settings.otp.ttl_minutes,
        otp_cooldown_minutes=settings.otp.cooldown_minutes,
    )
    return Container(
        settings=settings,
        users=users,
        challenges=challenges,
        sender=sender,
        otp=otp,
        tokens=tokens,
        service=service,
        database=database,
    )


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[Container] = None,
) -> FastAPI:
    """Build the FastAPI app with auth, health, error handling and request logging."""
    if container is None:
        container = build_container(settings)
    settings = container.settings

    setup_logging(settings.service_name, level=settings.log_level, json_output=settings.log_json)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if container.database is not None:
            await container.database.create_all()
        yield
        await container.close()

    app = FastAPI(title=settings.service_name, version=__version__, lifespan=lifespan)
    app.state.container = container

    install_error_handlers(app)
    app.add_middleware(RequestLoggingMiddleware)
    app.include_router(create_auth_router(container.service))
    app.include_router(
        create_health_router(settings.service_name, __version__, container.database)
    )
    return app
