from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.orm import Session

from dukan.core.database import get_db
from dukan.core.deps import get_current_user, require_admin
from dukan.core.serialization_helpers import CamelModel, Money
from dukan.models.user import User
from dukan.services import reporting_service


router = APIRouter()


class DailySales(CamelModel):
    date: str
    total_sales: Money


class DashboardReport(CamelModel):
    total_sales: Money
    total_tax: Money
    sales_count: int
    today_sales: Money
    today_sales_count: int
    total_expenses: Money
    total_purchases: Money
    stock_value: Money
    product_count: int
    low_stock_count: int
    recent_sales: List[DailySales]


class ProductProfit(CamelModel):
    product_id: Optional[int] = None
    product_name: str
    units_sold: int
    revenue: Money
    cost: Money
    profit: Money


class ProfitLossReport(CamelModel):
    products: List[ProductProfit]
    total_revenue: Money
    total_cost: Money
    gross_profit: Money
    total_expenses: Money
    net_profit: Money


class Gstr1Invoice(CamelModel):
    invoice_number: str
    sale_date: datetime
    customer_name: Optional[str] = None
    customer_gstin: Optional[str] = None
    taxable_value: Money
    tax_amount: Money
    invoice_value: Money


class HsnSummary(CamelModel):
    hsn_code: str
    quantity: int
    taxable_value: Money
    tax_amount: Money


class Gstr1Report(CamelModel):
    start_date: date
    end_date: date
    b2b: List[Gstr1Invoice] = Field(alias="b2b")
    b2c: List[Gstr1Invoice] = Field(alias="b2c")
    hsn_summary: List[HsnSummary]
    total_taxable_value: Money
    total_tax: Money
    total_invoice_value: Money


class Gstr2Bill(CamelModel):
    purchase_id: int
    bill_number: Optional[str] = None
    purchase_date: datetime
    supplier_name: str
    supplier_gstin: Optional[str] = None
    taxable_value: Money
    tax_amount: Money
    bill_value: Money


class Gstr2Report(CamelModel):
    start_date: date
    end_date: date
    bills: List[Gstr2Bill]
    total_taxable_value: Money
    total_tax: Money
    total_bill_value: Money


class Gstr3Report(CamelModel):
    start_date: date
    end_date: date
    outward_taxable_value: Money
    output_tax: Money
    itc_purchases: Money
    itc_expenses: Money
    total_itc: Money
    net_tax: Money
    tax_payable: Money
    credit_carried_forward: Money
    expense_gst_rate: Money


class BalanceSheetReport(CamelModel):
    as_of: date
    inventory_value: Money
    cash_position: Money
    tax_credit: Money
    total_assets: Money
    tax_payable: Money
    total_liabilities: Money
    equity: Money


class DashboardResponse(CamelModel):
    success: bool = True
    report: DashboardReport


class ProfitLossResponse(CamelModel):
    success: bool = True
    report: ProfitLossReport


class Gstr1Response(CamelModel):
    success: bool = True
    report: Gstr1Report


class Gstr2Response(CamelModel):
    success: bool = True
    report: Gstr2Report


class Gstr3Response(CamelModel):
    success: bool = True
    report: Gstr3Report


class BalanceSheetResponse(CamelModel):
    success: bool = True
    report: BalanceSheetReport


@router.get("/dashboard", response_model=DashboardResponse)
def dashboard(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    data = reporting_service.get_dashboard(db, user.shop_id)
    return DashboardResponse(report=DashboardReport.model_validate(data))


@router.get("/profit-loss", response_model=ProfitLossResponse)
def profit_loss(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    data = reporting_service.get_profit_loss(db, user.shop_id, start_date, end_date)
    return ProfitLossResponse(report=ProfitLossReport.model_validate(data))


@router.get("/gstr1", response_model=Gstr1Response)
def gstr1(
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    data = reporting_service.get_gstr1(db, admin.shop_id, start_date, end_date)
    return Gstr1Response(report=Gstr1Report.model_validate(data))


@router.get("/gstr2", response_model=Gstr2Response)
def gstr2(
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    data = reporting_service.get_gstr2(db, admin.shop_id, start_date, end_date)
    return Gstr2Response(report=Gstr2Report.model_validate(data))


@router.get("/gstr3", response_model=Gstr3Response)
def gstr3(
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    data = reporting_service.get_gstr3(db, admin.shop_id, start_date, end_date)
    return Gstr3Response(report=Gstr3Report.model_validate(data))


@router.get("/balance-sheet", response_model=BalanceSheetResponse)
def balance_sheet(
    as_of: Optional[date] = Query(None, alias="asOf"),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    data = reporting_service.get_balance_sheet(db, admin.shop_id, as_of)
    return BalanceSheetResponse(report=BalanceSheetReport.model_validate(data))
