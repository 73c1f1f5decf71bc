from decimal import Decimal

from textilehome.seed import SAMPLE_PRODUCTS, normalize_entry, seed_products


def test_list_products(client):
    res = client.get("/api/products")
    assert res.status_code == 200
    body = res.json()
    assert len(body) == len(SAMPLE_PRODUCTS)
    first = body[0]
    assert first["name"] == "Premium Cotton Sheets"
    assert Decimal(first["price"]) == Decimal("89.99")
    assert first["imageUrl"].startswith("https://images.unsplash.com/")
    assert first["inStock"] is True
    assert first["featured"] is True


def test_featured_products(client):
    body = client.get("/api/products/featured").json()
    assert len(body) == 5
    assert all(p["featured"] for p in body)


def test_products_by_category(client):
    body = client.get("/api/products/category/bedsheets").json()
    assert len(body) == 8
    assert {p["category"] for p in body} == {"bedsheets"}


def test_unknown_category_is_empty(client):
    res = client.get("/api/products/category/curtains")
    assert res.status_code == 200
    assert res.json() == []


def test_search_matches_name_description_and_material(client):
    res = client.get("/api/products/search", params={"q": "LINEN"})
    assert res.status_code == 200
    names = sorted(p["name"] for p in res.json())
    assert names == ["Linen Pillow Shams", "Linen Table Runner", "Pure Linen Sheets"]


def test_search_treats_wildcards_literally(client):
    assert client.get("/api/products/search", params={"q": "_"}).json() == []


def test_search_requires_query(client):
    assert client.get("/api/products/search").status_code == 400
    res = client.get("/api/products/search", params={"q": "   "})
    assert res.status_code == 400
    assert res.json()["detail"] == "Search query is required"


def test_get_product(client):
    res = client.get("/api/products/10")
    assert res.status_code == 200
    assert res.json()["name"] == "Silk Pillowcase"


def test_get_product_invalid_id(client):
    res = client.get("/api/products/abc")
    assert res.status_code == 400
    assert res.json()["detail"] == "Invalid product ID"


def test_get_missing_product(client):
    res = client.get("/api/products/9999")
    assert res.status_code == 404
    assert res.json()["detail"] == "Product not found"


def test_seed_only_fills_empty_table(db):
    assert seed_products(db) == 0


def test_normalize_entry_accepts_camel_case_and_rejects_unknown_category():
    entry = normalize_entry(
        {"name": "Test", "price": 12.5, "category": "bedsheets", "imageUrl": "x.jpg", "inStock": False}
    )
    assert entry["image_url"] == "x.jpg"
    assert entry["in_stock"] is False
    assert entry["price"] == Decimal("12.5")
    assert normalize_entry({"name": "Rug", "price": 1, "category": "rugs"}) is None


def test_product_id_must_be_plain_digits(client):
    for raw in ("1_0", "%207", "+7", "١"):
        res = client.get(f"/api/products/{raw}")
        assert res.status_code == 400, raw
        assert res.json()["detail"] == "Invalid product ID"
