"""Integration tests for the product API endpoints via TestClient."""

import pytest
from protean.utils.globals import current_domain

from storefront.product.product import Product


def _add_product(slug, base_price=999.0, active=True, **fields):
    variants = fields.pop("variants", [("M", "navy", 5)])
    product = Product.create(
        slug=slug,
        title=fields.pop("title", slug.replace("-", " ").title()),
        category=fields.pop("category", "polos"),
        base_price=base_price,
        **fields,
    )
    for size, color, stock in variants:
        product.add_variant(sku=f"{slug}-{size}-{color}".upper(), size=size, color=color, stock_level=stock)
    if not active:
        product.deactivate()
    current_domain.repository_for(Product).add(product)
    return product


@pytest.fixture()
def polo():
    return _add_product(
        "navy-polo",
        base_price=899.0,
        mrp=1199.0,
        brand="Polohigh",
        variants=[("S", "navy", 3), ("M", "navy", 0), ("M", "white", 12)],
        media=[{"url": "https://cdn.example.com/navy-polo.jpg", "type": "image"}],
        tags=["summer"],
        max_quantity=4,
    )


class TestListProducts:
    def test_list_returns_camel_case_summaries(self, client, polo):
        response = client.get("/api/products")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["total"] == 1
        assert data["totalPages"] == 1

        summary = data["products"][0]
        assert summary["id"] == "navy-polo"
        assert summary["price"] == 899.0
        assert summary["mrp"] == 1199.0
        assert summary["discountPercentage"] == 25.0
        assert summary["sizes"] == ["S", "M"]
        assert [c["value"] for c in summary["colors"]] == ["navy", "white"]
        assert summary["imageUrl"] == "https://cdn.example.com/navy-polo.jpg"
        assert summary["isAvailable"] is True

    def test_default_brand(self, client):
        _add_product("plain-tee", brand=None)

        summary = client.get("/api/products").json()["products"][0]
        assert summary["brand"] == "Polohigh"

    def test_filters_from_query_string(self, client, polo):
        _add_product("red-tee", base_price=399.0, category="t-shirts", variants=[("L", "red", 2)])

        response = client.get("/api/products", params={"maxPrice": 500, "colors": "red,green"})

        assert [p["id"] for p in response.json()["products"]] == ["red-tee"]

    def test_inactive_products_are_hidden(self, client, polo):
        _add_product("old-polo", active=False)

        assert client.get("/api/products").json()["total"] == 1
        assert client.get("/api/products", params={"includeInactive": "true"}).json()["total"] == 2

    def test_unknown_sort_is_rejected(self, client):
        response = client.get("/api/products", params={"sort": "popularity"})

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_limit_out_of_range_is_rejected(self, client):
        response = client.get("/api/products", params={"limit": 500})
        assert response.status_code == 400


class TestProductDetail:
    def test_detail_resolves_selected_variant(self, client, polo):
        response = client.get("/api/products/navy-polo", params={"size": "M", "color": "white"})

        assert response.status_code == 200
        product = response.json()["product"]
        assert product["slug"] == "navy-polo"
        assert product["selectedVariant"]["sku"] == "NAVY-POLO-M-WHITE"
        assert product["isPurchasable"] is True
        assert product["maxQuantity"] == 4
        assert product["totalStock"] == 15
        assert len(product["variants"]) == 3

    def test_detail_falls_back_to_size(self, client, polo):
        product = client.get("/api/products/navy-polo", params={"size": "S", "color": "white"}).json()["product"]

        assert product["selectedVariant"]["sku"] == "NAVY-POLO-S-NAVY"
        assert product["maxQuantity"] == 3

    def test_out_of_stock_selection_is_not_purchasable(self, client, polo):
        product = client.get("/api/products/navy-polo", params={"size": "M", "color": "navy"}).json()["product"]

        assert product["isPurchasable"] is False
        assert product["maxQuantity"] == 4

    def test_related_products_skip_inactive(self, client):
        active = _add_product("white-tee")
        inactive = _add_product("old-tee", active=False)
        _add_product("combo-polo", related_product_ids=[str(active.id), str(inactive.id)])

        product = client.get("/api/products/combo-polo").json()["product"]

        assert [p["id"] for p in product["relatedProducts"]] == ["white-tee"]

    def test_unknown_product_is_404(self, client):
        response = client.get("/api/products/missing")

        assert response.status_code == 404
        assert response.json()["reason"] == "product_not_found"

    def test_inactive_product_is_404(self, client):
        _add_product("old-polo", active=False)
        assert client.get("/api/products/old-polo").status_code == 404


class TestVariantsAndAvailability:
    def test_variants_filtered_by_size(self, client, polo):
        response = client.get("/api/products/navy-polo/variants", params={"size": "m"})

        assert response.status_code == 200
        assert {v["sku"] for v in response.json()["variants"]} == {"NAVY-POLO-M-NAVY", "NAVY-POLO-M-WHITE"}

    def test_availability_for_product(self, client, polo):
        data = client.get("/api/products/navy-polo/availability").json()

        assert data["available"] is True
        assert data["totalStock"] == 15

    def test_availability_for_sku(self, client, polo):
        data = client.get("/api/products/navy-polo/availability", params={"sku": "NAVY-POLO-M-NAVY"}).json()

        assert data["available"] is False
        assert data["stockLevel"] == 0

    def test_availability_for_unknown_sku(self, client, polo):
        response = client.get("/api/products/navy-polo/availability", params={"sku": "NOPE"})

        assert response.status_code == 404
        assert response.json()["reason"] == "variant_not_found"


class TestUpdateStock:
    def test_update_stock(self, client, polo):
        response = client.patch("/api/products/navy-polo/stock", json={"sku": "NAVY-POLO-M-NAVY", "stockLevel": 7})

        assert response.status_code == 200
        data = response.json()
        assert data["variant"] == {"sku": "NAVY-POLO-M-NAVY", "stockLevel": 7}
        assert data["totalStock"] == 22
        assert data["lowStock"] is True

        product = current_domain.repository_for(Product).get_by_slug("navy-polo")
        assert product.total_stock == 22

    def test_negative_stock_is_rejected(self, client, polo):
        response = client.patch("/api/products/navy-polo/stock", json={"sku": "NAVY-POLO-M-NAVY", "stockLevel": -1})
        assert response.status_code == 400

    def test_unknown_sku_is_404(self, client, polo):
        response = client.patch("/api/products/navy-polo/stock", json={"sku": "NOPE", "stockLevel": 1})
        assert response.status_code == 404
