import logging
from datetime import date
from pathlib import Path

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .config import settings
from .database import DatabaseClient, DatabaseError, get_db
from .models import ErrorResponse
from .routers.business_profile import router as business_profile_router
from .routers.invoices import router as invoices_router

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
)
logger = logging.getLogger("invoice_api")

# Initialize FastAPI app
app = FastAPI(
    title="Invoice Manager API",
    description="Invoices and business profiles with server-computed totals",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

allow_all = "*" in settings.cors_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins) or ["*"],
    allow_credentials=not allow_all,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)

# Serve uploaded logos, stamps and signatures
Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")

app.include_router(invoices_router)
app.include_router(business_profile_router)


@app.get("/")
async def root():
    """Health check endpoint"""
    return {"message": "Invoice Manager API is running", "status": "healthy"}


@app.get("/api/health")
async def health_check(db: DatabaseClient = Depends(get_db)):
    """Detailed health check with database connectivity"""
    try:
        db.ping()
    except DatabaseError as e:
        raise HTTPException(
            status_code=503,
            detail=f"Service unavailable: {str(e)}"
        )
    return {
        "status": "healthy",
        "database": "connected",
        "timestamp": date.today().isoformat()
    }


# Error handlers
@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            success=False,
            error=str(exc.detail),
            details=f"Status Code: {exc.status_code}"
        ).model_dump()
    )


@app.exception_handler(DatabaseError)
async def database_exception_handler(request, exc):
    return JSONResponse(
        status_code=503,
        content=ErrorResponse(
            success=False,
            error="Database unavailable",
            details=str(exc)
        ).model_dump()
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            success=False,
            error="Internal server error",
            details=str(exc)
        ).model_dump()
    )
