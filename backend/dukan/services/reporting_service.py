"""
Read-only reports over a shop's sales, purchases, expenses and stock.

Nothing here writes or caches. Amounts are summed as Decimal exactly as
stored; rounding happens only when the API serialises them.
"""
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Tuple, TypedDict

from sqlalchemy import func
from sqlalchemy.orm import Session

from dukan.core.config import settings
from dukan.core.errors import InvalidInput
from dukan.models.customer import Customer
from dukan.models.expense import Expense
from dukan.models.product import Product
from dukan.models.purchase import Purchase
from dukan.models.sale import Sale, SaleItem


ZERO = Decimal("0")


class DailySales(TypedDict):
    date: str
    total_sales: Decimal


class DashboardData(TypedDict):
    total_sales: Decimal
    total_tax: Decimal
    sales_count: int
    today_sales: Decimal
    today_sales_count: int
    total_expenses: Decimal
    total_purchases: Decimal
    stock_value: Decimal
    product_count: int
    low_stock_count: int
    recent_sales: List[DailySales]


class ProductProfit(TypedDict):
    product_id: Optional[int]
    product_name: str
    units_sold: int
    revenue: Decimal
    cost: Decimal
    profit: Decimal


class ProfitLossData(TypedDict):
    products: List[ProductProfit]
    total_revenue: Decimal
    total_cost: Decimal
    gross_profit: Decimal
    total_expenses: Decimal
    net_profit: Decimal


class Gstr1Invoice(TypedDict):
    invoice_number: str
    sale_date: datetime
    customer_name: Optional[str]
    customer_gstin: Optional[str]
    taxable_value: Decimal
    tax_amount: Decimal
    invoice_value: Decimal


class HsnSummary(TypedDict):
    hsn_code: str
    quantity: int
    taxable_value: Decimal
    tax_amount: Decimal


class Gstr1Data(TypedDict):
    start_date: date
    end_date: date
    b2b: List[Gstr1Invoice]
    b2c: List[Gstr1Invoice]
    hsn_summary: List[HsnSummary]
    total_taxable_value: Decimal
    total_tax: Decimal
    total_invoice_value: Decimal


class Gstr2Bill(TypedDict):
    purchase_id: int
    bill_number: Optional[str]
    purchase_date: datetime
    supplier_name: str
    supplier_gstin: Optional[str]
    taxable_value: Decimal
    tax_amount: Decimal
    bill_value: Decimal


class Gstr2Data(TypedDict):
    start_date: date
    end_date: date
    bills: List[Gstr2Bill]
    total_taxable_value: Decimal
    total_tax: Decimal
    total_bill_value: Decimal


class Gstr3Data(TypedDict):
    start_date: date
    end_date: date
    outward_taxable_value: Decimal
    output_tax: Decimal
    itc_purchases: Decimal
    itc_expenses: Decimal
    total_itc: Decimal
    net_tax: Decimal
    tax_payable: Decimal
    credit_carried_forward: Decimal
    expense_gst_rate: Decimal


class BalanceSheetData(TypedDict):
    as_of: date
    inventory_value: Decimal
    cash_position: Decimal
    tax_credit: Decimal
    total_assets: Decimal
    tax_payable: Decimal
    total_liabilities: Decimal
    equity: Decimal


def _dec(value) -> Decimal:
    if value is None:
        return ZERO
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _bounds(start_date: date, end_date: date) -> Tuple[datetime, datetime]:
    """Half-open [start 00:00, day after end 00:00) window."""
    if start_date > end_date:
        raise InvalidInput("startDate must be on or before endDate")
    return datetime.combine(start_date, time.min), datetime.combine(end_date + timedelta(days=1), time.min)


def _sales_sum(
    db: Session,
    shop_id: int,
    column,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    gst_only: bool = False,
):
    query = db.query(func.coalesce(func.sum(column), 0)).filter(Sale.shop_id == shop_id)
    if gst_only:
        query = query.filter(Sale.is_gstr_applicable.is_(True))
    if start is not None:
        query = query.filter(Sale.sale_date >= start)
    if end is not None:
        query = query.filter(Sale.sale_date < end)
    return _dec(query.scalar())


def _expense_sum(db: Session, shop_id: int, start: Optional[datetime] = None, end: Optional[datetime] = None) -> Decimal:
    query = db.query(func.coalesce(func.sum(Expense.amount), 0)).filter(Expense.shop_id == shop_id)
    if start is not None:
        query = query.filter(Expense.expense_date >= start)
    if end is not None:
        query = query.filter(Expense.expense_date < end)
    return _dec(query.scalar())


def _purchase_sum(db: Session, shop_id: int, column, start: Optional[datetime] = None, end: Optional[datetime] = None) -> Decimal:
    query = db.query(func.coalesce(func.sum(column), 0)).filter(Purchase.shop_id == shop_id)
    if start is not None:
        query = query.filter(Purchase.purchase_date >= start)
    if end is not None:
        query = query.filter(Purchase.purchase_date < end)
    return _dec(query.scalar())


def _expense_itc(db: Session, shop_id: int, start: Optional[datetime], end: Optional[datetime], rate: Decimal) -> Decimal:
    """
    Input tax credit on expenses. Bills with itemised GST count as recorded;
    the rest are assumed GST-inclusive at the flat ``rate``, i.e.
    amount * rate / (100 + rate). An approximation, not an accounting of
    actual bills.
    """
    query = db.query(Expense.amount, Expense.tax_amount).filter(Expense.shop_id == shop_id)
    if start is not None:
        query = query.filter(Expense.expense_date >= start)
    if end is not None:
        query = query.filter(Expense.expense_date < end)
    total = ZERO
    for amount, tax_amount in query.all():
        if tax_amount is not None:
            total += _dec(tax_amount)
        else:
            total += _dec(amount) * rate / (Decimal("100") + rate)
    return total


def get_dashboard(db: Session, shop_id: int, today: Optional[date] = None) -> DashboardData:
    today = today or datetime.utcnow().date()
    today_start, today_end = _bounds(today, today)
    week_start = datetime.combine(today - timedelta(days=6), time.min)

    sales_count = db.query(func.count(Sale.id)).filter(Sale.shop_id == shop_id).scalar() or 0
    today_count = (
        db.query(func.count(Sale.id))
        .filter(Sale.shop_id == shop_id, Sale.sale_date >= today_start, Sale.sale_date < today_end)
        .scalar()
        or 0
    )

    stock_value = _dec(
        db.query(func.coalesce(func.sum(Product.quantity * Product.cost_price), 0))
        .filter(Product.shop_id == shop_id)
        .scalar()
    )
    product_count = db.query(func.count(Product.id)).filter(Product.shop_id == shop_id).scalar() or 0
    low_stock_count = (
        db.query(func.count(Product.id))
        .filter(Product.shop_id == shop_id, Product.quantity <= Product.low_stock_threshold)
        .scalar()
        or 0
    )

    day = func.date(Sale.sale_date)
    recent_rows = (
        db.query(day.label("day"), func.sum(Sale.total_amount).label("total"))
        .filter(Sale.shop_id == shop_id, Sale.sale_date >= week_start, Sale.sale_date < today_end)
        .group_by(day)
        .order_by(day)
        .all()
    )
    recent_sales: List[DailySales] = [
        {"date": str(row.day)[:10], "total_sales": _dec(row.total)} for row in recent_rows
    ]

    return {
        "total_sales": _sales_sum(db, shop_id, Sale.total_amount),
        "total_tax": _sales_sum(db, shop_id, Sale.total_tax),
        "sales_count": int(sales_count),
        "today_sales": _sales_sum(db, shop_id, Sale.total_amount, today_start, today_end),
        "today_sales_count": int(today_count),
        "total_expenses": _expense_sum(db, shop_id),
        "total_purchases": _purchase_sum(db, shop_id, Purchase.total_amount),
        "stock_value": stock_value,
        "product_count": int(product_count),
        "low_stock_count": int(low_stock_count),
        "recent_sales": recent_sales,
    }


def get_profit_loss(
    db: Session,
    shop_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> ProfitLossData:
    """
    Per-product profit using the cost recorded on each sale item, so later
    cost changes do not rewrite past margins. Either date may be omitted to
    leave that side of the range open.
    """
    if start_date and end_date:
        start, end = _bounds(start_date, end_date)
    else:
        start = datetime.combine(start_date, time.min) if start_date else None
        end = datetime.combine(end_date + timedelta(days=1), time.min) if end_date else None

    query = (
        db.query(SaleItem, Product.name)
        .join(Sale, SaleItem.sale_id == Sale.id)
        .outerjoin(Product, SaleItem.product_id == Product.id)
        .filter(Sale.shop_id == shop_id)
    )
    if start is not None:
        query = query.filter(Sale.sale_date >= start)
    if end is not None:
        query = query.filter(Sale.sale_date < end)

    by_product: Dict[Optional[int], ProductProfit] = {}
    for item, product_name in query.all():
        row = by_product.get(item.product_id)
        if row is None:
            row = {
                "product_id": item.product_id,
                "product_name": product_name or "Deleted product",
                "units_sold": 0,
                "revenue": ZERO,
                "cost": ZERO,
                "profit": ZERO,
            }
            by_product[item.product_id] = row
        row["units_sold"] += int(item.quantity)
        row["revenue"] += _dec(item.price_per_unit) * item.quantity
        row["cost"] += _dec(item.cost_price) * item.quantity

    products = sorted(by_product.values(), key=lambda r: r["product_name"])
    for row in products:
        row["profit"] = row["revenue"] - row["cost"]

    total_revenue = sum((r["revenue"] for r in products), ZERO)
    total_cost = sum((r["cost"] for r in products), ZERO)
    total_expenses = _expense_sum(db, shop_id, start, end)
    gross_profit = total_revenue - total_cost
    return {
        "products": products,
        "total_revenue": total_revenue,
        "total_cost": total_cost,
        "gross_profit": gross_profit,
        "total_expenses": total_expenses,
        "net_profit": gross_profit - total_expenses,
    }


def get_gstr1(db: Session, shop_id: int, start_date: date, end_date: date) -> Gstr1Data:
    """
    Outward supplies from GST-applicable sales. Sales to customers with a
    GSTIN are B2B, everything else B2C. Sale totals are tax-inclusive.
    """
    start, end = _bounds(start_date, end_date)
    rows = (
        db.query(Sale, Customer)
        .outerjoin(Customer, Sale.customer_id == Customer.id)
        .filter(
            Sale.shop_id == shop_id,
            Sale.is_gstr_applicable.is_(True),
            Sale.sale_date >= start,
            Sale.sale_date < end,
        )
        .order_by(Sale.sale_date.asc(), Sale.id.asc())
        .all()
    )

    b2b: List[Gstr1Invoice] = []
    b2c: List[Gstr1Invoice] = []
    sale_ids = []
    for sale, customer in rows:
        sale_ids.append(sale.id)
        invoice: Gstr1Invoice = {
            "invoice_number": sale.invoice_number,
            "sale_date": sale.sale_date,
            "customer_name": customer.name if customer else None,
            "customer_gstin": customer.gstin if customer else None,
            "taxable_value": _dec(sale.total_amount) - _dec(sale.total_tax),
            "tax_amount": _dec(sale.total_tax),
            "invoice_value": _dec(sale.total_amount),
        }
        (b2b if invoice["customer_gstin"] else b2c).append(invoice)

    hsn: Dict[str, HsnSummary] = {}
    if sale_ids:
        items = (
            db.query(SaleItem, Product.hsn_code)
            .outerjoin(Product, SaleItem.product_id == Product.id)
            .filter(SaleItem.sale_id.in_(sale_ids))
            .all()
        )
        for item, hsn_code in items:
            key = hsn_code or "N/A"
            entry = hsn.setdefault(key, {"hsn_code": key, "quantity": 0, "taxable_value": ZERO, "tax_amount": ZERO})
            entry["quantity"] += int(item.quantity)
            entry["taxable_value"] += _dec(item.price_per_unit) * item.quantity
            entry["tax_amount"] += _dec(item.tax_amount)

    invoices = b2b + b2c
    return {
        "start_date": start_date,
        "end_date": end_date,
        "b2b": b2b,
        "b2c": b2c,
        "hsn_summary": sorted(hsn.values(), key=lambda e: e["hsn_code"]),
        "total_taxable_value": sum((i["taxable_value"] for i in invoices), ZERO),
        "total_tax": sum((i["tax_amount"] for i in invoices), ZERO),
        "total_invoice_value": sum((i["invoice_value"] for i in invoices), ZERO),
    }


def get_gstr2(db: Session, shop_id: int, start_date: date, end_date: date) -> Gstr2Data:
    """Inward supplies: purchases recorded in the period."""
    start, end = _bounds(start_date, end_date)
    purchases = (
        db.query(Purchase)
        .filter(Purchase.shop_id == shop_id, Purchase.purchase_date >= start, Purchase.purchase_date < end)
        .order_by(Purchase.purchase_date.asc(), Purchase.id.asc())
        .all()
    )
    bills: List[Gstr2Bill] = [
        {
            "purchase_id": p.id,
            "bill_number": p.bill_number,
            "purchase_date": p.purchase_date,
            "supplier_name": p.supplier_name,
            "supplier_gstin": p.supplier_gstin,
            "taxable_value": _dec(p.total_amount) - _dec(p.total_tax),
            "tax_amount": _dec(p.total_tax),
            "bill_value": _dec(p.total_amount),
        }
        for p in purchases
    ]
    return {
        "start_date": start_date,
        "end_date": end_date,
        "bills": bills,
        "total_taxable_value": sum((b["taxable_value"] for b in bills), ZERO),
        "total_tax": sum((b["tax_amount"] for b in bills), ZERO),
        "total_bill_value": sum((b["bill_value"] for b in bills), ZERO),
    }


def get_gstr3(
    db: Session,
    shop_id: int,
    start_date: date,
    end_date: date,
    expense_gst_rate: Optional[Decimal] = None,
) -> Gstr3Data:
    """
    Summary return: tax collected on GST-applicable sales less input tax
    credit from purchases and expenses.
    """
    rate = _dec(settings.expense_gst_rate if expense_gst_rate is None else expense_gst_rate)
    start, end = _bounds(start_date, end_date)

    outward = (
        db.query(
            func.coalesce(func.sum(Sale.total_amount), 0),
            func.coalesce(func.sum(Sale.total_tax), 0),
        )
        .filter(
            Sale.shop_id == shop_id,
            Sale.is_gstr_applicable.is_(True),
            Sale.sale_date >= start,
            Sale.sale_date < end,
        )
        .one()
    )
    outward_total, output_tax = _dec(outward[0]), _dec(outward[1])

    itc_purchases = _purchase_sum(db, shop_id, Purchase.total_tax, start, end)
    itc_expenses = _expense_itc(db, shop_id, start, end, rate)
    total_itc = itc_purchases + itc_expenses
    net_tax = output_tax - total_itc
    return {
        "start_date": start_date,
        "end_date": end_date,
        "outward_taxable_value": outward_total - output_tax,
        "output_tax": output_tax,
        "itc_purchases": itc_purchases,
        "itc_expenses": itc_expenses,
        "total_itc": total_itc,
        "net_tax": net_tax,
        "tax_payable": max(net_tax, ZERO),
        "credit_carried_forward": max(-net_tax, ZERO),
        "expense_gst_rate": rate,
    }


def get_balance_sheet(db: Session, shop_id: int, as_of: Optional[date] = None) -> BalanceSheetData:
    """
    Simplified balance sheet: stock at cost, cash as sales less purchases and
    expenses, and the net GST position as either a payable or a credit.
    """
    as_of = as_of or datetime.utcnow().date()
    end = datetime.combine(as_of + timedelta(days=1), time.min)
    rate = _dec(settings.expense_gst_rate)

    inventory_value = _dec(
        db.query(func.coalesce(func.sum(Product.quantity * Product.cost_price), 0))
        .filter(Product.shop_id == shop_id)
        .scalar()
    )
    sales_total = _sales_sum(db, shop_id, Sale.total_amount, None, end)
    output_tax = _sales_sum(db, shop_id, Sale.total_tax, None, end, gst_only=True)
    purchases_total = _purchase_sum(db, shop_id, Purchase.total_amount, None, end)
    expenses_total = _expense_sum(db, shop_id, None, end)
    itc = _purchase_sum(db, shop_id, Purchase.total_tax, None, end) + _expense_itc(db, shop_id, None, end, rate)

    cash_position = sales_total - purchases_total - expenses_total
    net_tax = output_tax - itc
    tax_payable = max(net_tax, ZERO)
    tax_credit = max(-net_tax, ZERO)
    total_assets = inventory_value + cash_position + tax_credit
    return {
        "as_of": as_of,
        "inventory_value": inventory_value,
        "cash_position": cash_position,
        "tax_credit": tax_credit,
        "total_assets": total_assets,
        "tax_payable": tax_payable,
        "total_liabilities": tax_payable,
        "equity": total_assets - tax_payable,
    }


def get_day_totals(db: Session, shop_id: int, day: date) -> Dict[str, object]:
    """Figures for a single day, used by the daily closing snapshot."""
    start, end = _bounds(day, day)
    by_method = (
        db.query(Sale.payment_method, func.coalesce(func.sum(Sale.total_amount), 0), func.count(Sale.id))
        .filter(Sale.shop_id == shop_id, Sale.sale_date >= start, Sale.sale_date < end)
        .group_by(Sale.payment_method)
        .all()
    )
    return {
        "sales_count": sum(int(count) for _, _, count in by_method),
        "sales_total": _sales_sum(db, shop_id, Sale.total_amount, start, end),
        "tax_total": _sales_sum(db, shop_id, Sale.total_tax, start, end),
        "sales_by_payment_method": {method: _dec(total) for method, total, _ in by_method},
        "expenses_total": _expense_sum(db, shop_id, start, end),
        "purchases_total": _purchase_sum(db, shop_id, Purchase.total_amount, start, end),
    }
