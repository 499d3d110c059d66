# src/config/settings.py

"""Central configuration for the catalog_admin panel."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the catalog_admin panel."""

    # --- Remote API ---
    API_BASE_URL: str = os.getenv(
        "CATALOG_API_BASE_URL", "https://dummyjson.com"
    ).rstrip("/")
    REQUEST_TIMEOUT: int = int(
        os.getenv("CATALOG_REQUEST_TIMEOUT", "15")
    )                                   # Seconds before a request times out

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": "application/json",
        "Accept-Language": "en-US,en;q=0.9",
        "Content-Type": "application/json",
    }

    # --- Query cache ---
    QUERY_STALE_TIME: float = 300.0     # Seconds before an entry is stale

    # --- Search ---
    SEARCH_DEBOUNCE_SECONDS: float = 0.3

    # --- Pagination ---
    DEFAULT_PAGE_SIZE: int = 10
    PAGE_SIZE_OPTIONS: list[int] = [10, 20, 30, 50]

    # --- Product form ---
    CATEGORIES: list[str] = [
        "beauty",
        "fragrances",
        "furniture",
        "groceries",
        "home-decoration",
        "kitchen-accessories",
        "laptops",
        "mens-shirts",
        "mens-shoes",
        "mens-watches",
        "mobile-accessories",
        "motorcycle",
        "skin-care",
        "smartphones",
        "sports-accessories",
        "sunglasses",
        "tablets",
        "tops",
        "vehicle",
        "womens-bags",
        "womens-dresses",
        "womens-jewellery",
        "womens-shoes",
        "womens-watches",
    ]
    WELL_STOCKED_THRESHOLD: int = 10    # Stock above this is "well stocked"

    # --- Logging ---
    CONSOLE_LOG_LEVEL: str = os.getenv("CATALOG_LOG_LEVEL", "WARNING")

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    LOGS_DIR: Path = BASE_DIR / "logs"
