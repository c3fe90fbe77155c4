from decimal import Decimal

from fastapi import status

from storefront.models.product import Product


def test_list_products_only_active(client, db, products):
    db.add(Product(id="C", name="Hidden", price=Decimal("1.00"), inventory=1, is_active=False))
    db.commit()

    response = client.get("/api/products")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert [product["id"] for product in data] == ["A", "B"]
    assert data[0]["price"] == "5.00"
    assert data[0]["inventory"] == 10


def test_get_product(client, products):
    response = client.get("/api/products/B")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["name"] == "Beta Tee"
    assert response.json()["price"] == "9.99"


def test_get_product_not_found(client):
    response = client.get("/api/products/nope")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["kind"] == "not-found"


def test_admin_creates_product(client, db, admin_headers):
    response = client.post(
        "/api/products",
        json={"id": "SKU-1", "name": "Candle", "price": "12.50", "inventory": 40},
        headers=admin_headers,
    )

    assert response.status_code == status.HTTP_201_CREATED
    product = db.query(Product).filter(Product.id == "SKU-1").one()
    assert product.price == Decimal("12.50")
    assert product.inventory == 40


def test_create_product_duplicate(client, products, admin_headers):
    response = client.post(
        "/api/products",
        json={"id": "A", "name": "Dup", "price": "1.00"},
        headers=admin_headers,
    )

    assert response.status_code == status.HTTP_409_CONFLICT


def test_create_product_negative_price(client, admin_headers):
    response = client.post(
        "/api/products",
        json={"id": "X", "name": "Bad", "price": "-1.00"},
        headers=admin_headers,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["kind"] == "invalid-argument"


def test_customer_cannot_create_product(client, auth_headers):
    response = client.post(
        "/api/products",
        json={"id": "X", "name": "Nope", "price": "1.00"},
        headers=auth_headers,
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_admin_updates_product(client, db, products, admin_headers):
    response = client.put(
        "/api/products/A",
        json={"inventory": 25, "price": "6.00"},
        headers=admin_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["inventory"] == 25
    assert response.json()["price"] == "6.00"
    assert response.json()["name"] == "Alpha Mug"


def test_update_missing_product(client, admin_headers):
    response = client.put("/api/products/missing", json={"inventory": 1}, headers=admin_headers)

    assert response.status_code == status.HTTP_404_NOT_FOUND
