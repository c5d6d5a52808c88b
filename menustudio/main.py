import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from menustudio.config import settings
from menustudio.core.errors import BackendError, GatewayError, TransientError
from menustudio.core.retry import check_backend_health
from menustudio.modules.ai.gateway import close_http_client
from menustudio.modules.auth import routes as auth_routes
from menustudio.modules.generations import routes as generations_routes
from menustudio.modules.menu_photos import routes as menu_photos_routes
from menustudio.modules.styles import routes as styles_routes
from menustudio.modules.admin_settings import routes as admin_settings_routes
from menustudio.modules.organizations import routes as organizations_routes
from menustudio.modules.analytics import routes as analytics_routes
from menustudio.modules.ai import routes as ai_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(GatewayError, ai_routes.gateway_error_handler)


@app.exception_handler(BackendError)
async def backend_error_handler(request: Request, exc: BackendError):
    if isinstance(exc, TransientError):
        return JSONResponse(status_code=503, content={"detail": "Backend temporarily unavailable"})
    logger.error(f"Backend error on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code or 500, content={"detail": exc.message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
    return JSONResponse(status_code=500, content={"detail": str(exc)})


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"X-XSS-Protection", b"1; mode=block"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include module routes
app.include_router(auth_routes.router, prefix="/api/v1")
app.include_router(generations_routes.router, prefix="/api/v1")
app.include_router(menu_photos_routes.router, prefix="/api/v1")
app.include_router(menu_photos_routes.trash_router, prefix="/api/v1")
app.include_router(styles_routes.router, prefix="/api/v1")
app.include_router(styles_routes.admin_router, prefix="/api/v1")
app.include_router(admin_settings_routes.router, prefix="/api/v1")
app.include_router(admin_settings_routes.admin_router, prefix="/api/v1")
app.include_router(organizations_routes.router, prefix="/api/v1")
app.include_router(analytics_routes.router, prefix="/api/v1")
app.include_router(analytics_routes.admin_router, prefix="/api/v1")
# AI endpoints keep the edge function paths the web client calls
app.include_router(ai_routes.router)


@app.on_event("startup")
async def startup_event():
    logger.info("Application startup")
    if not settings.ai_gateway_key:
        logger.warning("AI_GATEWAY_KEY is not set; AI endpoints will fail")


@app.on_event("shutdown")
async def shutdown_event():
    await close_http_client()
    logger.info("Application shutdown")


@app.get("/")
async def root():
    return {"message": "Welcome to menustudio-backend", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Readiness probe: the Supabase REST API must answer."""
    if not await check_backend_health(settings.supabase_url, settings.supabase_key):
        return JSONResponse(status_code=503, content={"status": "unavailable"})
    return {"status": "ready"}
