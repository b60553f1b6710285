import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.database import Base, engine
from app.models import coupon, employee, notification  # noqa: F401  (register tables)
from app.routers import calendar as calendar_router
from app.routers import coupons as coupons_router
from app.routers import employees as employees_router
from app.routers import notifications as notifications_router
from app.services.exceptions import CouponError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Meal Coupon Management API",
    description="Working-day meal coupons for employees: barcode generation, claiming and alerts",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(employees_router.router)
app.include_router(coupons_router.router)
app.include_router(calendar_router.router)
app.include_router(notifications_router.router)


@app.get("/health")
def health():
    return {"status": "healthy"}


def _error_body(status_code: int, detail, **extra):
    return {"error": {"status_code": status_code, "detail": detail, **extra}}


# Proper JSON error with correct status code
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.status_code, exc.detail))


@app.exception_handler(CouponError)
async def coupon_error_handler(request: Request, exc: CouponError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    else:
        logger.info("%s %s rejected (%d): %s", request.method, request.url.path, exc.status_code, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.status_code, exc.detail, type=type(exc).__name__, **exc.extra),
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
