def test_create_product_applies_defaults(client, shop):
    r = client.post(
        "/products",
        json={"name": "Rice", "unit": "kg", "costPrice": 40, "sellingPrice": 52.5},
        headers=shop["headers"],
    )
    assert r.status_code == 201
    product = r.json()["product"]
    assert product["quantity"] == 0
    assert product["taxRate"] == 0
    assert product["sellingPrice"] == 52.5
    assert product["lowStockThreshold"] == 10
    assert product["barcode"] is None


def test_create_product_requires_prices(client, shop):
    r = client.post("/products", json={"name": "Rice", "unit": "kg", "costPrice": 40}, headers=shop["headers"])
    assert r.status_code == 400
    assert "sellingPrice" in r.json()["message"]


def test_negative_quantity_is_invalid(client, shop, make_product):
    r = client.post(
        "/products",
        json={"name": "Rice", "unit": "kg", "costPrice": 40, "sellingPrice": 50, "quantity": -1},
        headers=shop["headers"],
    )
    assert r.status_code == 400


def test_duplicate_barcode_conflicts_across_shops(client, make_shop, make_product):
    alice = make_shop("alice")
    dave = make_shop("dave")
    make_product(alice["headers"], barcode="890100")

    r = client.post(
        "/products",
        json={"name": "Other soap", "unit": "piece", "costPrice": 1, "sellingPrice": 2, "barcode": "890100"},
        headers=dave["headers"],
    )
    assert r.status_code == 409
    assert "Barcode" in r.json()["message"]


def test_duplicate_name_in_same_shop_conflicts(client, shop, make_product):
    make_product(shop["headers"])
    r = client.post(
        "/products",
        json={"name": "Soap", "unit": "piece", "costPrice": 1, "sellingPrice": 2},
        headers=shop["headers"],
    )
    assert r.status_code == 409
    assert "named Soap" in r.json()["message"]


def test_same_name_allowed_in_different_shops(make_shop, make_product):
    make_product(make_shop("alice")["headers"])
    make_product(make_shop("dave")["headers"])


def test_products_without_barcode_do_not_collide(shop, make_product):
    make_product(shop["headers"], name="A", barcode="")
    make_product(shop["headers"], name="B", barcode="")


def test_update_and_delete_are_tenant_scoped(client, make_shop, make_product):
    alice = make_shop("alice")
    dave = make_shop("dave")
    product = make_product(alice["headers"])
    body = {"name": "Hacked", "unit": "piece", "costPrice": 1, "sellingPrice": 1}

    assert client.get(f"/products/{product['id']}", headers=dave["headers"]).status_code == 404
    assert client.put(f"/products/{product['id']}", json=body, headers=dave["headers"]).status_code == 404
    assert client.delete(f"/products/{product['id']}", headers=dave["headers"]).status_code == 404

    r = client.get(f"/products/{product['id']}", headers=alice["headers"])
    assert r.json()["name"] == "Soap"


def test_update_product(client, shop, make_product):
    product = make_product(shop["headers"])
    r = client.put(
        f"/products/{product['id']}",
        json={"name": "Soap XL", "unit": "piece", "costPrice": 12, "sellingPrice": 18, "quantity": 9},
        headers=shop["headers"],
    )
    assert r.status_code == 200
    assert r.json()["product"]["name"] == "Soap XL"
    assert r.json()["product"]["quantity"] == 9


def test_delete_product(client, shop, make_product):
    product = make_product(shop["headers"])
    r = client.delete(f"/products/{product['id']}", headers=shop["headers"])
    assert r.status_code == 200
    assert client.get(f"/products/{product['id']}", headers=shop["headers"]).status_code == 404


def test_lookup_by_barcode_is_scoped_to_shop(client, make_shop, make_product):
    alice = make_shop("alice")
    dave = make_shop("dave")
    make_product(alice["headers"], barcode="12345")

    r = client.get("/products/barcode/12345", headers=alice["headers"])
    assert r.status_code == 200
    assert r.json()["success"] is True
    assert r.json()["product"]["name"] == "Soap"
    assert client.get("/products/barcode/12345", headers=dave["headers"]).status_code == 404
    assert client.get("/products/barcode/99999", headers=alice["headers"]).status_code == 404


def test_list_search_low_stock_and_categories(client, shop, make_product):
    make_product(shop["headers"], name="Soap", quantity=3, category="Personal care")
    make_product(shop["headers"], name="Rice", quantity=50, category="Grocery")

    names = [p["name"] for p in client.get("/products", params={"q": "ric"}, headers=shop["headers"]).json()]
    assert names == ["Rice"]

    low = client.get("/products", params={"lowStock": "true"}, headers=shop["headers"]).json()
    assert [p["name"] for p in low] == ["Soap"]

    cats = client.get("/products/categories", headers=shop["headers"]).json()
    assert cats == ["Grocery", "Personal care"]
