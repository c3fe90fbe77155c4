from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from storefront.dependencies import get_current_admin
from storefront.errors import InvalidArgument, ProductNotFound
from storefront.models import Product, User, get_db
from storefront.schemas.products import ProductCreateRequest, ProductResponse, ProductUpdateRequest

router = APIRouter()


def _validate_product_fields(price=None, inventory=None) -> None:
    if price is not None and price < 0:
        raise InvalidArgument("price must not be negative")
    if inventory is not None and inventory < 0:
        raise InvalidArgument("inventory must not be negative")


@router.get(
    "",
    response_model=list[ProductResponse],
    summary="List products",
)
def list_products(
    db: Annotated[Session, Depends(get_db)],
):
    """Returns all active products with price and stock."""
    products = db.query(Product).filter(Product.is_active == True).order_by(Product.name).all()
    return [ProductResponse.model_validate(product) for product in products]


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Get product by ID",
)
def get_product(
    product_id: str,
    db: Annotated[Session, Depends(get_db)],
):
    product = db.query(Product).filter(Product.id == product_id, Product.is_active == True).first()
    if not product:
        raise ProductNotFound(product_id)
    return ProductResponse.model_validate(product)


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create product (admin)",
)
def create_product(
    body: ProductCreateRequest,
    _admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    if not body.id.strip():
        raise InvalidArgument("id is required")
    _validate_product_fields(body.price, body.inventory)
    if db.query(Product).filter(Product.id == body.id).first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Product already exists")

    product = Product(
        id=body.id,
        name=body.name,
        description=body.description,
        price=body.price,
        inventory=body.inventory,
        is_active=body.is_active,
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    return ProductResponse.model_validate(product)


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Update product (admin)",
)
def update_product(
    product_id: str,
    body: ProductUpdateRequest,
    _admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    """Partial update. Setting inventory here is a restock, not a settlement delta."""
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise ProductNotFound(product_id)
    changes = body.model_dump(exclude_unset=True)
    _validate_product_fields(changes.get("price"), changes.get("inventory"))
    for name, value in changes.items():
        setattr(product, name, value)
    db.commit()
    db.refresh(product)
    return ProductResponse.model_validate(product)
