import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import Config
from app.db.database import init_db
from app.exceptions import (
    create_exception_handler,
    BookingValidationException,
    CouponInvalidException,
    CouponLimitReachedException,
    StoreException,
)
from app.routers.bookings import router as bookings_router
from app.routers.coupons import router as coupons_router
from app.routers.messages import router as messages_router
from app.routers.services import router as services_router
from app.routers.site_settings import router as site_settings_router
from app.websockets.routes import router as websocket_router
from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(level=Config.LOG_LEVEL, format="%(asctime)s - %(levelname)s - %(message)s")
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

api_version = "v1"
swagger_docs_url = f"/api/{api_version}/docs"
redoc_docs_url = f"/api/{api_version}/redoc"
openapi_url = f"/api/{api_version}/openapi.json"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.info("Initialising database tables...")
    await init_db()
    yield


app = FastAPI(
    docs_url=swagger_docs_url,
    redoc_url=redoc_docs_url,
    openapi_url=openapi_url,
    title="TechFix API",
    description="Bookings, coupons and the admin inbox for a tech-repair services website.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=['GET', 'POST', 'PUT', 'PATCH', 'DELETE'],
    allow_headers=["*"],
)

# Register endpoints
app.include_router(bookings_router, prefix=f'/api/{api_version}/bookings', tags=["Bookings"])
app.include_router(coupons_router, prefix=f'/api/{api_version}/coupons', tags=["Coupons"])
app.include_router(services_router, prefix=f'/api/{api_version}/services', tags=["Services"])
app.include_router(messages_router, prefix=f'/api/{api_version}/messages', tags=["Messages"])
app.include_router(site_settings_router, prefix=f'/api/{api_version}/site-settings', tags=["Site Settings"])
app.include_router(websocket_router)


@app.get("/")
async def root():
    return {
        "message": "TechFix API",
        "version": "1.0.0",
        "docs": swagger_docs_url,
        "status": "running"
    }

@app.get("/health")
async def health_check():
    return {"status": "healthy"}

# Register custom exceptions

# Booking and coupon exception handlers
app.add_exception_handler(BookingValidationException, create_exception_handler(422, "Missing details", "Please complete all required fields."))
app.add_exception_handler(CouponInvalidException, create_exception_handler(400, "Invalid Coupon", "This coupon is invalid or expired."))
app.add_exception_handler(CouponLimitReachedException, create_exception_handler(409, "Coupon Limit", "This coupon has reached its limit."))

# Database exception handlers
app.add_exception_handler(StoreException, create_exception_handler(503, "Error", "The request could not be saved. Please try again."))
app.add_exception_handler(SQLAlchemyError, create_exception_handler(503, "Error", "The request could not be saved. Please try again."))
