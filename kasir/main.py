from contextlib import asynccontextmanager
from pathlib import Path
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from kasir.core.config import get_settings
from kasir.core.errors import PosError
from kasir.db.session import SessionLocal, engine
from kasir.routers.health import router as health_router
from kasir.routers.items import router as items_router
from kasir.routers.logs import router as logs_router
from kasir.routers.reports import router as reports_router
from kasir.routers.sales import router as sales_router
from kasir.routers.stock import router as stock_router
from kasir.routers.store import router as store_router
from kasir.services.bootstrap import init_db, seed_defaults
from kasir.services.document_store import DocumentStore

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    init_db(engine)
    db = SessionLocal()
    try:
        seed_defaults(DocumentStore(db), settings)
    finally:
        db.close()
    logger.info(f"{settings.APP_NAME} ready (timezone {settings.TIMEZONE})")
    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="Point-of-sale backend - inventory, sales and daily/monthly reports for a single store.",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(PosError)
async def pos_error_handler(request: Request, exc: PosError):
    """Typed core errors carry their own status and machine-readable kind."""
    if exc.status_code >= 500:
        logger.error(f"{exc.kind}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and parameters are the caller's fault: 400, not 422."""
    return JSONResponse(
        status_code=400,
        content={
            "error": "validation_error",
            "message": "Invalid request format",
            "details": {"errors": [{"loc": list(e["loc"]), "msg": e["msg"]} for e in exc.errors()]},
        },
    )


# Global exception handler for unhandled errors
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected server errors with structured response."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred. Please try again later.",
            "request_id": request.headers.get("X-Request-ID"),
        }
    )

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

# Include routers
app.include_router(health_router)
app.include_router(items_router, prefix="/api")
app.include_router(sales_router, prefix="/api")
app.include_router(stock_router, prefix="/api")
app.include_router(reports_router, prefix="/api")
app.include_router(logs_router, prefix="/api")
app.include_router(store_router, prefix="/api")


@app.get("/")
def read_root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "docs": "/docs",
        "health": "/health"
    }


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    uvicorn.run("kasir.main:app", host="0.0.0.0", port=8000)
