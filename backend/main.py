import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from postboard.api.endpoints import account, auth, credits, posts, public
from postboard.core.database import Base, engine
from postboard.core.settings import settings
from postboard.models import credit_purchase, post, user  # noqa: F401  (register tables)
from postboard.services.errors import ServiceError

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger("postboard")

app = FastAPI(title="Postboard API")

# Configure CORS
origins = settings.resolved_cors_origins()
if origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

@app.on_event("startup")
def startup() -> None:
    settings.resolved_jwt_secret()
    if settings.db_auto_create:
        Base.metadata.create_all(bind=engine)
    os.makedirs(settings.uploads_dir, exist_ok=True)
    logger.info("startup environment=%s gateway=%s", settings.environment, settings.payment_gateway)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    content = {"detail": exc.message, "error": exc.kind}
    field = getattr(exc, "field", None)
    if field:
        content["field"] = field
    if hasattr(exc, "required") and hasattr(exc, "available"):
        content["required"] = exc.required
        content["available"] = exc.available
    return JSONResponse(status_code=exc.status_code, content=content)


# API Routes
app.include_router(auth.router, prefix="/api", tags=["auth"])
app.include_router(account.router, prefix="/api", tags=["account"])
app.include_router(posts.router, prefix="/api", tags=["posts"])
app.include_router(public.router, prefix="/api", tags=["public"])
app.include_router(credits.router, prefix="/api", tags=["credits"])

@app.get("/health")
async def health_check():
    return {"status": "healthy"}

# Uploaded post images; the directory is created on startup
app.mount(settings.uploads_url_prefix, StaticFiles(directory=settings.uploads_dir, check_dir=False), name="uploads")
