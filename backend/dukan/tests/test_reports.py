from datetime import datetime, timedelta

import pytest


@pytest.fixture()
def trading_day(client, shop, make_product):
    """Three sales, one purchase and two expenses on the current day."""
    headers = shop["headers"]
    product = make_product(headers, name="Rice", quantity=10, costPrice=100, sellingPrice=150, hsnCode="1006")
    b2b = client.post(
        "/customers",
        json={"name": "Hotel Annapurna", "phone": "111", "gstin": "29ABCDE1234F1Z5"},
        headers=headers,
    ).json()["customer"]
    walk_in = client.post("/customers", json={"name": "Ravi", "phone": "222"}, headers=headers).json()["customer"]

    def sell(qty, tax, customer_id, gst):
        r = client.post(
            "/sales",
            json={
                "customerId": customer_id,
                "totalAmount": 150 * qty + tax,
                "totalTax": tax,
                "paymentMethod": "cash",
                "isGSTRApplicable": gst,
                "items": [{"productId": product["id"], "quantity": qty, "pricePerUnit": 150, "taxAmount": tax}],
            },
            headers=headers,
        )
        assert r.status_code == 201, r.text

    sell(2, 54, b2b["id"], True)
    sell(1, 27, walk_in["id"], True)
    sell(1, 0, None, False)

    r = client.post(
        "/purchases",
        json={
            "supplierName": "Grain Traders",
            "supplierGstin": "29XYZAB1234C1Z9",
            "billNumber": "GT-1",
            "items": [{"productId": product["id"], "quantity": 5, "costPrice": 90, "taxAmount": 81}],
        },
        headers=headers,
    )
    assert r.status_code == 201, r.text

    client.post("/expenses", json={"description": "Electricity", "amount": 1180}, headers=headers)
    client.post("/expenses", json={"description": "Courier", "amount": 100, "taxAmount": 10}, headers=headers)
    return product


def _today():
    return datetime.utcnow().date().isoformat()


def _range():
    return {"startDate": _today(), "endDate": _today()}


def test_dashboard(client, shop, trading_day):
    r = client.get("/reports/dashboard", headers=shop["headers"])
    assert r.status_code == 200
    assert r.json()["success"] is True
    body = r.json()["report"]
    assert body["totalSales"] == 681
    assert body["totalTax"] == 81
    assert body["salesCount"] == 3
    assert body["todaySales"] == 681
    assert body["totalExpenses"] == 1280
    assert body["totalPurchases"] == 531
    # 10 - 4 sold + 5 bought, at the latest cost of 90
    assert body["stockValue"] == 990
    assert body["lowStockCount"] == 0
    assert body["recentSales"] == [{"date": _today(), "totalSales": 681}]


def test_profit_loss_uses_cost_at_time_of_sale(client, shop, trading_day):
    body = client.get("/reports/profit-loss", headers=shop["headers"]).json()["report"]
    assert body["products"] == [
        {
            "productId": trading_day["id"],
            "productName": "Rice",
            "unitsSold": 4,
            "revenue": 600,
            "cost": 400,
            "profit": 200,
        }
    ]
    assert body["grossProfit"] == 200
    assert body["totalExpenses"] == 1280
    assert body["netProfit"] == -1080


def test_gstr1_splits_b2b_and_b2c(client, shop, trading_day):
    r = client.get("/reports/gstr1", params=_range(), headers=shop["headers"])
    assert r.status_code == 200
    assert r.json()["success"] is True
    body = r.json()["report"]
    assert "b2b" in body and "b2c" in body
    assert len(body["b2b"]) == 1
    assert body["b2b"][0]["customerGstin"] == "29ABCDE1234F1Z5"
    assert body["b2b"][0]["taxableValue"] == 300
    assert body["b2b"][0]["taxAmount"] == 54
    assert len(body["b2c"]) == 1
    assert body["b2c"][0]["invoiceValue"] == 177
    assert body["hsnSummary"] == [{"hsnCode": "1006", "quantity": 3, "taxableValue": 450, "taxAmount": 81}]
    assert body["totalTaxableValue"] == 450
    assert body["totalTax"] == 81
    assert body["totalInvoiceValue"] == 531


def test_gstr2_lists_purchases(client, shop, trading_day):
    body = client.get("/reports/gstr2", params=_range(), headers=shop["headers"]).json()["report"]
    assert len(body["bills"]) == 1
    bill = body["bills"][0]
    assert bill["supplierGstin"] == "29XYZAB1234C1Z9"
    assert bill["taxableValue"] == 450
    assert bill["taxAmount"] == 81
    assert body["totalBillValue"] == 531


def test_gstr3_nets_output_tax_against_itc(client, shop, trading_day):
    body = client.get("/reports/gstr3", params=_range(), headers=shop["headers"]).json()["report"]
    assert body["outputTax"] == 81
    assert body["itcPurchases"] == 81
    # 1180 * 18 / 118 on the untaxed bill plus 10 itemised
    assert body["itcExpenses"] == 190
    assert body["totalItc"] == 271
    assert body["netTax"] == -190
    assert body["taxPayable"] == 0
    assert body["creditCarriedForward"] == 190


def test_balance_sheet(client, shop, trading_day):
    body = client.get("/reports/balance-sheet", headers=shop["headers"]).json()["report"]
    assert body["inventoryValue"] == 990
    assert body["cashPosition"] == -1130
    assert body["taxCredit"] == 190
    assert body["taxPayable"] == 0
    assert body["totalAssets"] == 50
    assert body["equity"] == 50


def test_profit_loss_accepts_open_ended_ranges(client, shop, trading_day):
    today = datetime.utcnow().date()
    tomorrow = (today + timedelta(days=1)).isoformat()
    yesterday = (today - timedelta(days=1)).isoformat()

    def units(params):
        r = client.get("/reports/profit-loss", params=params, headers=shop["headers"])
        assert r.status_code == 200
        return sum(p["unitsSold"] for p in r.json()["report"]["products"])

    assert units({"startDate": today.isoformat()}) == 4
    assert units({"startDate": tomorrow}) == 0
    assert units({"endDate": yesterday}) == 0
    assert units({"endDate": today.isoformat()}) == 4

    body = client.get("/reports/profit-loss", params={"startDate": tomorrow}, headers=shop["headers"]).json()
    assert body["report"]["totalExpenses"] == 0


def test_balance_sheet_tax_counts_gst_sales_only(client, shop, make_product):
    product = make_product(shop["headers"], quantity=5, costPrice=10, sellingPrice=15)
    r = client.post(
        "/sales",
        json={
            "totalAmount": 20,
            "totalTax": 5,
            "isGSTRApplicable": False,
            "items": [{"productId": product["id"], "quantity": 1, "pricePerUnit": 15, "taxAmount": 5}],
        },
        headers=shop["headers"],
    )
    assert r.status_code == 201, r.text

    gstr3 = client.get("/reports/gstr3", params=_range(), headers=shop["headers"]).json()["report"]
    assert gstr3["outputTax"] == 0
    sheet = client.get("/reports/balance-sheet", headers=shop["headers"]).json()["report"]
    assert sheet["taxPayable"] == 0
    assert sheet["totalLiabilities"] == 0
    assert sheet["totalAssets"] == 60
    assert sheet["equity"] == 60


def test_reports_ignore_other_periods_and_shops(client, make_shop, shop, trading_day):
    yesterday = (datetime.utcnow().date() - timedelta(days=1)).isoformat()
    body = client.get(
        "/reports/gstr1", params={"startDate": yesterday, "endDate": yesterday}, headers=shop["headers"]
    ).json()["report"]
    assert body["b2b"] == [] and body["b2c"] == []
    assert body["totalTax"] == 0

    other = make_shop("dave")
    dash = client.get("/reports/dashboard", headers=other["headers"]).json()["report"]
    assert dash["totalSales"] == 0
    assert dash["salesCount"] == 0
    assert dash["recentSales"] == []


def test_inverted_range_is_invalid(client, shop):
    yesterday = (datetime.utcnow().date() - timedelta(days=1)).isoformat()
    r = client.get("/reports/gstr3", params={"startDate": _today(), "endDate": yesterday}, headers=shop["headers"])
    assert r.status_code == 400


def test_gst_reports_are_admin_only(client, staff_headers):
    assert client.get("/reports/gstr1", params=_range(), headers=staff_headers).status_code == 403
    assert client.get("/reports/balance-sheet", headers=staff_headers).status_code == 403
    assert client.get("/reports/dashboard", headers=staff_headers).status_code == 200
