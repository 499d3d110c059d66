# src/filters/stock_summary.py

"""Stock buckets and display formatting for product tables."""

from dataclasses import dataclass

from src.config.settings import Settings
from src.models.product import ProductList


@dataclass
class StockSummary:
    """Counts shown under the product table."""

    total: int
    in_stock: int
    well_stocked: int
    low_stock: int
    out_of_stock: int


def summarize_stock(page: ProductList) -> StockSummary:
    """Bucket the products on *page* by stock level.

    ``total`` is the server-side total, the buckets only cover the
    products actually on the page.
    """
    threshold = Settings.WELL_STOCKED_THRESHOLD
    stocks = [p.stock for p in page.products]
    return StockSummary(
        total=page.total,
        in_stock=sum(1 for s in stocks if s > 0),
        well_stocked=sum(1 for s in stocks if s > threshold),
        low_stock=sum(1 for s in stocks if 0 < s <= threshold),
        out_of_stock=sum(1 for s in stocks if s == 0),
    )


def format_price(value: float) -> str:
    """Format a USD amount, e.g. ``1299`` -> ``$1,299.00``."""
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def stock_style(stock: int) -> str:
    """Rich style for a stock badge."""
    if stock > Settings.WELL_STOCKED_THRESHOLD:
        return "bold green"
    if stock > 0:
        return "yellow"
    return "bold red"
