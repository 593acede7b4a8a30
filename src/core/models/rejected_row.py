"""
RejectedRow model representing a raw row refused at ingestion, with error context.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator


class RejectedRow(BaseModel):
    """
    A raw input row that failed validation and was not inserted.

    Attributes:
        row_index: Position of the row in the ingested batch
        raw_payload: Original data before validation
        failed_rules: Rule names that failed
        error_messages: Corresponding error messages
        rejected_at: When the row was rejected
    """

    row_index: int = Field(..., ge=0)
    raw_payload: dict[str, Any]
    failed_rules: list[str] = Field(..., min_length=1)
    error_messages: list[str] = Field(..., min_length=1)
    rejected_at: datetime = Field(default_factory=datetime.utcnow)

    @field_validator('error_messages')
    @classmethod
    def check_arrays_same_length(cls, v, info):
        """Validate that failed_rules and error_messages have the same length."""
        failed_rules = info.data.get('failed_rules', [])
        if len(v) != len(failed_rules):
            raise ValueError(
                f"error_messages length ({len(v)}) must match failed_rules length ({len(failed_rules)})"
            )
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "row_index": 17,
                "raw_payload": {
                    "name": "",
                    "mrp": "-10",
                },
                "failed_rules": ["name_required"],
                "error_messages": ["[required_field] name: Field value is empty string"],
            }
        }
