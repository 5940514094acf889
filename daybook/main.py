import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import date, datetime, timezone

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from daybook.config import settings
from daybook.core.rate_limit import limiter
from daybook.database import get_db
from daybook.routers import bank_holidays, leave, office_tracker, profile
from daybook.services.bank_holidays import get_table

logger = logging.getLogger(__name__)


def holiday_table_current(today: date) -> bool:
    """Whether the bank holiday table reaches into next year."""
    return get_table().last_year > today.year


def check_holiday_coverage(today: date) -> bool:
    """Warn when the bank holiday table does not reach the end of next year.

    Dates past the table's horizon count as ordinary working days, so the
    data file has to be extended before they come into view.
    """
    if holiday_table_current(today):
        return True
    table = get_table()
    logger.warning(
        "Bank holiday table %s (%s) ends in %d; dates after that are never bank holidays",
        table.version, table.division, table.last_year,
    )
    return False


# ---------------------------------------------------------------------------
# Bank holiday coverage background task
# ---------------------------------------------------------------------------
async def _holiday_coverage_loop() -> None:
    """Check table coverage at startup, then yearly on Jan 1st."""
    while True:
        try:
            check_holiday_coverage(datetime.now(timezone.utc).date())
        except Exception:
            logger.exception("Bank holiday coverage check error")

        # Sleep until Jan 1st next year 00:15 UTC
        now = datetime.now(timezone.utc)
        next_jan = now.replace(
            year=now.year + 1, month=1, day=1,
            hour=0, minute=15, second=0, microsecond=0,
        )
        await asyncio.sleep((next_jan - now).total_seconds())


# ---------------------------------------------------------------------------
# Lifespan context manager
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan: runs on startup and shutdown."""
    logger.info("Daybook API started")
    coverage_task = asyncio.create_task(_holiday_coverage_loop())
    yield
    coverage_task.cancel()
    logger.info("Daybook API shutting down")


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------
app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
)

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

# -- Rate limiting ------------------------------------------------------------
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------
@app.get("/health", tags=["health"])
async def health_check(db: AsyncSession = Depends(get_db)):
    """Health check with DB connectivity and bank holiday horizon."""
    checks: dict[str, str] = {"db": "ok", "bank_holidays": "ok"}

    try:
        await db.execute(select(1))
    except Exception:
        logger.exception("Health check: database unreachable")
        checks["db"] = "error"

    if not holiday_table_current(date.today()):
        checks["bank_holidays"] = "expiring"

    # "expiring" is a maintenance reminder; only "error" = degraded
    degraded = any(v == "error" for v in checks.values())
    return {"status": "degraded" if degraded else "ok", "app": settings.APP_NAME, **checks}


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(profile.router, prefix=settings.API_V1_PREFIX)
app.include_router(office_tracker.router, prefix=settings.API_V1_PREFIX)
app.include_router(leave.router, prefix=settings.API_V1_PREFIX)
app.include_router(bank_holidays.router, prefix=settings.API_V1_PREFIX)
