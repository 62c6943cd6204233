from dukan.models.sale import Sale


def _sell(client, headers, items, total=None, **extra):
    body = {
        "totalAmount": total if total is not None else sum(i["quantity"] * i.get("pricePerUnit", 0) for i in items),
        "totalTax": 0,
        "paymentMethod": "cash",
        "items": items,
    }
    body.update(extra)
    return client.post("/sales", json=body, headers=headers)


def _quantity(client, headers, product_id):
    return client.get(f"/products/{product_id}", headers=headers).json()["quantity"]


def test_sale_decrements_stock_and_then_refuses_oversell(client, shop, make_product):
    product = make_product(shop["headers"], quantity=5, costPrice=10, sellingPrice=15)
    item = {"productId": product["id"], "quantity": 3, "pricePerUnit": 15, "taxAmount": 0}

    r = _sell(client, shop["headers"], [item], total=45)
    assert r.status_code == 201
    sale = r.json()["sale"]
    assert sale["saleId"] == sale["id"]
    assert sale["invoiceNumber"]
    assert sale["saleDate"]
    assert sale["items"][0]["costPrice"] == 10
    assert _quantity(client, shop["headers"], product["id"]) == 2

    r = _sell(client, shop["headers"], [item], total=45)
    assert r.status_code == 409
    assert "Insufficient stock for Soap" in r.json()["message"]
    assert _quantity(client, shop["headers"], product["id"]) == 2


def test_failed_item_rolls_back_whole_sale(client, db, shop, make_product):
    first = make_product(shop["headers"], name="First", quantity=5)
    items = [
        {"productId": first["id"], "quantity": 2, "pricePerUnit": 15},
        {"productId": 999999, "quantity": 1, "pricePerUnit": 15},
    ]
    r = _sell(client, shop["headers"], items, total=45)
    assert r.status_code == 404
    assert "999999" in r.json()["message"]

    assert _quantity(client, shop["headers"], first["id"]) == 5
    assert db.query(Sale).count() == 0


def test_insufficient_stock_on_later_item_keeps_earlier_stock(client, db, shop, make_product):
    first = make_product(shop["headers"], name="First", quantity=5)
    second = make_product(shop["headers"], name="Second", quantity=1)
    items = [
        {"productId": first["id"], "quantity": 2, "pricePerUnit": 15},
        {"productId": second["id"], "quantity": 2, "pricePerUnit": 15},
    ]
    r = _sell(client, shop["headers"], items, total=60)
    assert r.status_code == 409
    assert _quantity(client, shop["headers"], first["id"]) == 5
    assert _quantity(client, shop["headers"], second["id"]) == 1
    assert db.query(Sale).count() == 0


def test_sale_cannot_touch_other_shops_products(client, make_shop, make_product):
    alice = make_shop("alice")
    dave = make_shop("dave")
    product = make_product(alice["headers"], quantity=5)

    r = _sell(client, dave["headers"], [{"productId": product["id"], "quantity": 1, "pricePerUnit": 15}], total=15)
    assert r.status_code == 404
    assert _quantity(client, alice["headers"], product["id"]) == 5


def test_duplicate_invoice_number_conflicts(client, db, shop, make_product):
    product = make_product(shop["headers"], quantity=5)
    item = {"productId": product["id"], "quantity": 1, "pricePerUnit": 15}

    assert _sell(client, shop["headers"], [item], total=15, invoiceNumber="INV-1").status_code == 201
    r = _sell(client, shop["headers"], [item], total=15, invoiceNumber="INV-1")
    assert r.status_code == 409
    assert "INV-1" in r.json()["message"]
    assert _quantity(client, shop["headers"], product["id"]) == 4
    assert db.query(Sale).count() == 1


def test_server_assigns_sequential_invoice_numbers(client, shop, make_product):
    product = make_product(shop["headers"], quantity=5)
    item = {"productId": product["id"], "quantity": 1, "pricePerUnit": 15}
    first = _sell(client, shop["headers"], [item], total=15).json()["sale"]["invoiceNumber"]
    second = _sell(client, shop["headers"], [item], total=15).json()["sale"]["invoiceNumber"]
    assert first == f"INV-{shop['shop_id']}-000001"
    assert second == f"INV-{shop['shop_id']}-000002"


def test_server_numbering_skips_numbers_taken_by_client(client, shop, make_product):
    product = make_product(shop["headers"], quantity=5)
    item = {"productId": product["id"], "quantity": 1, "pricePerUnit": 15}
    taken = f"INV-{shop['shop_id']}-000001"
    assert _sell(client, shop["headers"], [item], total=15, invoiceNumber=taken).status_code == 201

    first = _sell(client, shop["headers"], [item], total=15)
    second = _sell(client, shop["headers"], [item], total=15)
    assert first.status_code == 201
    assert second.status_code == 201
    assert first.json()["sale"]["invoiceNumber"] == f"INV-{shop['shop_id']}-000002"
    assert second.json()["sale"]["invoiceNumber"] == f"INV-{shop['shop_id']}-000003"


def test_cost_snapshot_survives_cost_change(client, shop, make_product):
    product = make_product(shop["headers"], quantity=5, costPrice=10, sellingPrice=15)
    r = _sell(client, shop["headers"], [{"productId": product["id"], "quantity": 1, "pricePerUnit": 15}], total=15)
    sale_id = r.json()["sale"]["id"]

    client.put(
        f"/products/{product['id']}",
        json={"name": "Soap", "unit": "piece", "costPrice": 12, "sellingPrice": 15, "quantity": 4},
        headers=shop["headers"],
    )
    sale = client.get(f"/sales/{sale_id}", headers=shop["headers"]).json()
    assert sale["items"][0]["costPrice"] == 10


def test_empty_cart_and_missing_total_are_invalid(client, shop, make_product):
    r = client.post("/sales", json={"totalAmount": 10, "items": []}, headers=shop["headers"])
    assert r.status_code == 400
    assert r.json()["message"] == "Cart is empty"

    product = make_product(shop["headers"])
    r = client.post(
        "/sales",
        json={"items": [{"productId": product["id"], "quantity": 1, "pricePerUnit": 15}]},
        headers=shop["headers"],
    )
    assert r.status_code == 400
    assert r.json()["message"] == "totalAmount is required"


def test_non_positive_quantity_is_invalid(client, shop, make_product):
    product = make_product(shop["headers"])
    r = _sell(client, shop["headers"], [{"productId": product["id"], "quantity": 0, "pricePerUnit": 15}], total=0)
    assert r.status_code == 400


def test_sale_with_customer_from_other_shop_is_not_found(client, make_shop, make_product):
    alice = make_shop("alice")
    dave = make_shop("dave")
    customer = client.post("/customers", json={"name": "Ravi", "phone": "98765"}, headers=dave["headers"]).json()
    product = make_product(alice["headers"])

    r = _sell(
        client,
        alice["headers"],
        [{"productId": product["id"], "quantity": 1, "pricePerUnit": 15}],
        total=15,
        customerId=customer["customer"]["id"],
    )
    assert r.status_code == 404


def test_list_and_get_sales_are_tenant_scoped(client, make_shop, make_product):
    alice = make_shop("alice")
    dave = make_shop("dave")
    customer = client.post("/customers", json={"name": "Ravi", "phone": "98765"}, headers=alice["headers"]).json()
    product = make_product(alice["headers"])
    r = _sell(
        client,
        alice["headers"],
        [{"productId": product["id"], "quantity": 1, "pricePerUnit": 15}],
        total=15,
        customerId=customer["customer"]["id"],
        isGSTRApplicable=True,
    )
    sale = r.json()["sale"]
    assert sale["isGSTRApplicable"] is True

    listed = client.get("/sales", headers=alice["headers"]).json()
    assert [s["id"] for s in listed] == [sale["id"]]
    assert listed[0]["customerName"] == "Ravi"
    assert client.get("/sales", headers=dave["headers"]).json() == []
    assert client.get(f"/sales/{sale['id']}", headers=dave["headers"]).status_code == 404


def test_staff_can_sell(client, shop, staff_headers, make_product):
    product = make_product(shop["headers"])
    r = _sell(client, staff_headers, [{"productId": product["id"], "quantity": 1, "pricePerUnit": 15}], total=15)
    assert r.status_code == 201
