# src/config.py
import os
import logging
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent.parent

class Config:
    """Configuration settings for the storefront"""

    # Database settings (cloud mode when set, demo mode otherwise)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")
    CLOUD_MODE: bool = bool(DATABASE_URL)
    DB_POOL_MIN: int = int(os.getenv("DB_POOL_MIN", "2"))
    DB_POOL_MAX: int = int(os.getenv("DB_POOL_MAX", "10"))

    # Store settings
    SITE_NAME: str = os.getenv("SITE_NAME", "Baggo")
    WHATSAPP_NUMBER: str = os.getenv("WHATSAPP_NUMBER", "")
    CURRENCY_SYMBOL: str = os.getenv("CURRENCY_SYMBOL", "$")

    # Other settings
    TIMEZONE: str = os.getenv("TZ", "UTC")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Paths
    DATA_DIR = Path(os.getenv("DATA_DIR", str(BASE_DIR / "data")))
    LOG_DIR = Path(os.getenv("LOG_DIR", str(BASE_DIR / "logs")))
    STORE_FILE = DATA_DIR / "store.json"
    CART_FILE = DATA_DIR / "cart.json"
    SEED_FILE = Path(os.getenv("SEED_FILE", str(BASE_DIR / "seed_products.json")))

    # Ensure directories exist
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    LOG_DIR.mkdir(parents=True, exist_ok=True)

def setup_logging():
    """Configure logging settings"""
    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    log_file = Config.LOG_DIR / "baggo.log"

    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
        format=log_format,
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ]
    )
