"""
Configuration settings for OrderStar.

Centralized configuration for all pipeline stages and reports.
"""

import os
from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
DATA_ROOT = Path(os.getenv("ORDERSTAR_DATA_ROOT", str(PROJECT_ROOT / "data")))
OUTPUT_ROOT = Path(os.getenv("ORDERSTAR_OUTPUT_ROOT", str(PROJECT_ROOT / "output")))
DEFAULT_SOURCE_FILE = DATA_ROOT / "swiggy_data.csv"

# Source reading
SOURCE_ENCODING = "utf-8"
READ_CHUNK_SIZE = 10_000  # Rows per lazily read chunk
BOM_ARTIFACTS = ("\ufeff", "\u00ef\u00bb\u00bf")  # UTF-8 BOM, and the same bytes decoded as Latin-1

# Source columns
COL_STATE = "State"
COL_CITY = "City"
COL_LOCATION = "Location"
COL_RESTAURANT_NAME = "Restaurant Name"
COL_CATEGORY = "Category"
COL_DISH_NAME = "Dish Name"
COL_PRICE = "Price (INR)"
COL_RATING = "Rating"
COL_RATING_COUNT = "Rating Count"
COL_ORDER_DATE = "Order Date"

EXPECTED_COLUMNS = (
    COL_STATE,
    COL_CITY,
    COL_LOCATION,
    COL_RESTAURANT_NAME,
    COL_CATEGORY,
    COL_DISH_NAME,
    COL_PRICE,
    COL_RATING,
    COL_RATING_COUNT,
    COL_ORDER_DATE,
)

# Field normalization
DATE_FORMAT = "%d-%m-%Y"
RATING_MIN = 0.0
RATING_MAX = 5.0

# A record missing any of these is excluded from fact loading
REQUIRED_FIELDS = ("order_date", "restaurant_name", "city", "price")

# Violation reported for rows with more fields than the header
MALFORMED_ROW = "malformed_row"

# Fields counted in the validation summary
VALIDATION_TRACKED_FIELDS = ("order_date", "restaurant_name", "city", "price", "rating")

# Reports
TOP_CITIES_LIMIT = 10
TOP_CATEGORIES_LIMIT = 10
TOP_DISHES_LIMIT = 5
TOP_RESTAURANTS_LIMIT = 10

# (label, inclusive lower bound); each bucket ends where the next one starts
SPENDING_BUCKETS = (
    ("Under 100", 0),
    ("100-199", 100),
    ("200-299", 200),
    ("300-499", 300),
    ("500+", 500),
)

REVENUE_CURRENCY = "INR"
REVENUE_DIVISOR = 1_000_000

# Export
EXPORT_TABLES = True

# Logging
LOG_LEVEL = "INFO"  # DEBUG, INFO, WARNING, ERROR
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = "orderstar.log"
