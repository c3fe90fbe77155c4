from decimal import Decimal
from typing import Any

from pydantic import BaseModel


class PaymentIntentRequest(BaseModel):
    amount: Decimal
    currency: str | None = None
    metadata: dict[str, Any] | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [{"amount": "19.99", "currency": "usd", "metadata": {"cart_id": "c_42"}}]
        }
    }


class PaymentIntentResponse(BaseModel):
    client_secret: str
