from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.trustedhost import TrustedHostMiddleware

from finscope.core.config import settings
from finscope.core.database import init_db
from finscope.core.logging_config import setup_logging
from finscope.core.middleware import RequestContextMiddleware, SecurityHeadersMiddleware
from finscope.web.routes import api, auth, health

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize app on startup."""
    await init_db()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="Personal finance analysis and investment guidance",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=settings.ALLOWED_HOSTS,
)
app.add_middleware(RequestContextMiddleware)
app.add_middleware(SecurityHeadersMiddleware)

app.include_router(api.router, prefix="/api", tags=["api"])
app.include_router(auth.router, tags=["auth"])
app.include_router(health.router, tags=["health"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
