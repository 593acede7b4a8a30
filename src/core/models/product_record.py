"""
ProductRecord model representing a single product row of the inventory dataset.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

# Fields that must never be negative, in the order they are checked on write.
NON_NEGATIVE_FIELDS = (
    "mrp",
    "discount_percent",
    "available_quantity",
    "discounted_selling_price",
    "weight_in_gms",
    "quantity",
)

PRICE_FIELDS = ("mrp", "discounted_selling_price")


class ProductRecord(BaseModel):
    """
    A product held by the RecordStore.

    Field constraints (non-negative numbers, non-empty name) are not encoded
    on the model itself: they are enforced by the rule engine on every store
    write, so that a rejected mutation can be reported as a ConstraintViolation
    instead of failing at construction time.

    Attributes:
        sku_id: Unique product identity, issued monotonically by the store
        category: Free-text category (normalized to trimmed lowercase by the cleaner)
        name: Product name (required)
        mrp: Maximum retail price, pre-discount
        discount_percent: Advertised discount percentage
        available_quantity: Units currently in stock
        discounted_selling_price: Price after discount
        weight_in_gms: Pack weight in grams
        out_of_stock: Whether the product is currently unavailable
        quantity: Historical/purchase quantity (distinct from available_quantity)
        discount_amount: mrp - discounted_selling_price, derived once after cleaning
        price_unit_normalized: Set once the paise-to-rupee rescale has been applied
    """

    sku_id: int = Field(..., ge=1)
    category: str | None = None
    name: str
    mrp: Decimal
    discount_percent: Decimal
    available_quantity: int
    discounted_selling_price: Decimal
    weight_in_gms: int
    out_of_stock: bool = False
    quantity: int
    discount_amount: Decimal | None = None
    price_unit_normalized: bool = False

    @property
    def stock_value(self) -> Decimal:
        """Value of the units currently on hand at the selling price."""
        return self.discounted_selling_price * self.available_quantity

    class Config:
        json_schema_extra = {
            "example": {
                "sku_id": 1,
                "category": "Fruits & Vegetables",
                "name": "Onion",
                "mrp": "25.00",
                "discount_percent": "16.00",
                "available_quantity": 3,
                "discounted_selling_price": "21.00",
                "weight_in_gms": 1000,
                "out_of_stock": False,
                "quantity": 1,
            }
        }
