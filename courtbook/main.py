import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from courtbook.config import get_settings
from courtbook.core.errors import (
    BookingError,
    InvalidStatus,
    InvalidTimeRange,
    NotFound,
    PermissionDenied,
    RoleConflict,
    StartTimePast,
    TimeConflict,
)
from courtbook.db import init_database
from courtbook.routers import auth, bookings, locations, organizations, resources

logging.basicConfig(level=get_settings().log_level)
logger = logging.getLogger(__name__)

# first match along the exception's MRO wins
ERROR_STATUS = {
    InvalidTimeRange: status.HTTP_400_BAD_REQUEST,
    StartTimePast: status.HTTP_400_BAD_REQUEST,
    InvalidStatus: status.HTTP_400_BAD_REQUEST,
    NotFound: status.HTTP_404_NOT_FOUND,
    PermissionDenied: status.HTTP_403_FORBIDDEN,
    TimeConflict: status.HTTP_409_CONFLICT,
    RoleConflict: status.HTTP_409_CONFLICT,
}


def status_for(exc: BookingError) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@asynccontextmanager
async def lifespan(_: FastAPI):
    "lifespan for initing database"
    init_database()
    yield


app = FastAPI(
    lifespan=lifespan,
    title="Court booker",
    description="Conflict-free booking of courts and rooms with organization and location staff roles.",
    version="0.1.0",
    license_info={
        "name": "MIT",
        "url": "https://opensource.org/licenses/MIT",
    },
)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    status_code = status_for(exc)
    logger.info(f"{request.method} {request.url.path} -> {status_code} {exc.code}: {exc.message}")
    return JSONResponse(status_code=status_code, content={"detail": exc.message, "code": exc.code})


app.include_router(auth.router)
app.include_router(bookings.router)
app.include_router(resources.router)
app.include_router(organizations.router)
app.include_router(locations.router)
