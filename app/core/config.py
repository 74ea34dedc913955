import os

# Database Configuration
# Uses default credentials for local Docker Compose setup
DB_URL = os.getenv("DATABASE_URL", "postgres://user:password@db:5432/inventory_db")

# Application Metadata
PROJECT_NAME = "Inventory Tracking Service"
VERSION = "1.0.0"

# Inventory Rules
DEFAULT_LOW_STOCK_THRESHOLD = int(os.getenv("DEFAULT_LOW_STOCK_THRESHOLD", 5)) # Applied to new items without a threshold

# CSV Import
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads") # Uploaded files are spooled here while being imported

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
