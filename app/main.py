import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from app.core.db import init_db, close_db
from app.api.v1.items import router as items_router
from app.api.v1.suppliers import router as suppliers_router
from app.core.config import PROJECT_NAME, VERSION, UPLOAD_DIR, LOG_LEVEL, CORS_ORIGINS
from app.core.exception_handlers import setup_exception_handlers

logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
log = logging.getLogger("uvicorn")

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handles startup and shutdown events."""
    log.info(f"Starting {PROJECT_NAME} v{VERSION}...")
    await init_db() # Connect to DB and generate schemas
    os.makedirs(UPLOAD_DIR, exist_ok=True)
    yield 
    await close_db()
    log.info(f"{PROJECT_NAME} stopped.")

app = FastAPI(
    title=PROJECT_NAME,
    version=VERSION,
    lifespan=lifespan,
    # Configure API documentation and paths
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers for modular API structure
app.include_router(items_router, prefix="/api/v1/items", tags=["Inventory Items"])
app.include_router(suppliers_router, prefix="/api/v1/suppliers", tags=["Suppliers"])


setup_exception_handlers(app)

@app.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    """Simple health check endpoint."""
    return {"status": "ok", "app_name": PROJECT_NAME}
