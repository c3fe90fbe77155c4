from decimal import Decimal

from pydantic import BaseModel, field_serializer


class _ProductBase(BaseModel):
    @field_serializer("price", check_fields=False)
    def serialize_price(self, value: Decimal) -> str:
        normalized = Decimal(value).quantize(Decimal("0.01"))
        return format(normalized, "f")


class ProductResponse(_ProductBase):
    id: str
    name: str
    description: str | None = None
    price: Decimal
    inventory: int
    is_active: bool

    model_config = {"from_attributes": True}


class ProductCreateRequest(BaseModel):
    id: str
    name: str
    description: str | None = None
    price: Decimal
    inventory: int = 0
    is_active: bool = True


class ProductUpdateRequest(BaseModel):
    name: str | None = None
    description: str | None = None
    price: Decimal | None = None
    inventory: int | None = None
    is_active: bool | None = None
