import logging
import sys
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.core.db.engine import check_database_connection
from app.core.error_handler import (
    global_exception_handler,
    http_exception_handler,
    request_validation_handler,
)
from app.modules.assets import router as assets_router
from app.modules.warehouses import router as warehouses_router
from app.modules.transactions import router as transactions_router

# Configure logging to output to console
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)
logger.info("🚀 Starting Asset Ledger API...")

app = FastAPI(
    title="Asset Ledger API",
    description="Fixed-asset IN/OUT transactions, asset lookup and warehouses",
    version="1.0.0",
)

# Exception handlers
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(Exception, global_exception_handler)

# Middlewares
origins = [
    "http://localhost",
    "http://localhost:5173",
    "http://localhost:8080",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers with /api prefix
app.include_router(assets_router, prefix="/api")
app.include_router(warehouses_router, prefix="/api")
app.include_router(transactions_router, prefix="/api")


@app.get("/health")
async def health() -> dict[str, str]:
    database = "ok" if await check_database_connection() else "unavailable"
    return {"status": "ok", "database": database}
