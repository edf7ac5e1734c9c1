"""
FastAPI application entry point
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hotelcore.core.config import settings
from hotelcore.core.exceptions import CoreError
from hotelcore.core.logging import setup_logging
from hotelcore.db.database import engine, Base
from hotelcore.middleware.operation_log import OperationLogMiddleware
from hotelcore.notifications.dispatcher import get_dispatcher

# Import every model so the tables are registered
from hotelcore import models  # noqa: F401

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    dispatcher = get_dispatcher()
    dispatcher.start()
    logger.info("Hotel core API started")
    yield
    dispatcher.stop()


app = FastAPI(
    title="Hotel Guest Transaction Core API",
    description="Check-in/check-out, guest room-service ordering, promotions and folio settlement",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(OperationLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CoreError)
async def core_error_handler(request: Request, exc: CoreError):
    logger.info("%s %s rejected: %s (%s)", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "code": "internal_error"},
    )


@app.get("/")
async def root():
    return {"message": "Hotel Guest Transaction Core API", "version": "1.0.0"}


@app.get("/health")
async def health():
    return {"status": "ok"}


from hotelcore.api import auth, rooms, bookings, guest, orders, promotions, folios, operation_logs  # noqa: E402
app.include_router(auth.router)
app.include_router(rooms.router)
app.include_router(bookings.router)
app.include_router(guest.router)
app.include_router(orders.router)
app.include_router(promotions.router)
app.include_router(folios.router)
app.include_router(operation_logs.router)
