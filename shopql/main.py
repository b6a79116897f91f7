import asyncio
import logging

from fastapi import Depends, FastAPI, Request
from sqlalchemy.orm import Session
from strawberry.fastapi import GraphQLRouter

from . import __version__
from .auth import PasswordHasher, TokenIssuer
from .config import Settings, load_settings
from .context import resolve_identity
from .db import Base, create_db_engine, create_session_factory
from .graphql_schema import schema
from .logging_config import setup_logging
from .services import AuthService, OrderService, ProductService

logger = logging.getLogger(__name__)


# Dependency to get DB session per request

def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


async def get_context(request: Request, db: Session = Depends(get_db)) -> dict:
    state = request.app.state
    identity = resolve_identity(request.headers.get("authorization", ""), state.tokens)
    return {
        "identity": identity,
        "lock": asyncio.Lock(),
        "auth": AuthService(db, state.hasher, state.tokens),
        "products": ProductService(db),
        "orders": OrderService(db),
    }


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application. Raises ``ConfigError`` when JWT_SECRET is missing."""
    settings = settings or load_settings()
    setup_logging(settings.log_level)

    engine = create_db_engine(settings.database_url)
    # Create tables if not existing. Schema migrations are out of scope here.
    Base.metadata.create_all(bind=engine)

    app = FastAPI(title="shopql", version=__version__)
    app.state.settings = settings
    app.state.session_factory = create_session_factory(engine)
    app.state.hasher = PasswordHasher()
    app.state.tokens = TokenIssuer(settings.jwt_secret)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    app.include_router(GraphQLRouter(schema, context_getter=get_context), prefix="/graphql")

    logger.info("shopql app ready (database=%s)", engine.url.render_as_string(hide_password=True))
    return app
