"""
Input validation utilities
"""
from decimal import Decimal
from pydantic import BaseModel, ValidationError, field_validator

from swaplend.utils.helpers import to_decimal


class SwapAmountInput(BaseModel):
    """Validate the human-readable amount given on the command line"""
    amount: Decimal

    @field_validator('amount', mode='before')
    @classmethod
    def parse_amount(cls, v):
        return to_decimal(v)

    @field_validator('amount')
    @classmethod
    def amount_must_be_positive(cls, v):
        if v <= 0:
            raise ValueError('Amount must be positive')
        return v


def parse_swap_amount(raw: str) -> Decimal:
    """
    Parse a command line amount

    Raises ValueError with a readable message on bad input
    """
    try:
        return SwapAmountInput(amount=raw).amount
    except ValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        raise ValueError(messages) from None
