"""
CategorySummary model: the derived per-(category, name) stock value projection.
"""

from decimal import Decimal

from pydantic import BaseModel


class CategorySummary(BaseModel):
    """
    One row of the materialized inventory summary.

    Read-only: instances are rebuilt wholesale every time the summary is
    materialized and are never patched in place.

    Attributes:
        category: Product category (None for uncategorized products)
        name: Product name
        stock_value: Sum of available_quantity * discounted_selling_price
        revenue_share_percent: Share of the category's total stock value,
            rounded to 2 decimals (None when the category total is zero)
    """

    category: str | None
    name: str
    stock_value: Decimal
    revenue_share_percent: Decimal | None = None

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "category": "munchies",
                "name": "Lay's Classic Salted",
                "stock_value": "600.00",
                "revenue_share_percent": "60.00",
            }
        }
