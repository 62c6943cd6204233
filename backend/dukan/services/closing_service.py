"""
Daily closing: one snapshot of the day's figures per shop and date.
"""
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dukan.core.errors import Conflict, InvalidInput
from dukan.core.serialization_helpers import serialize_decimal
from dukan.models.daily_closing import DailyClosing
from dukan.services.reporting_service import get_day_totals


logger = logging.getLogger(__name__)


def _jsonable(totals: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in totals.items():
        if isinstance(value, Decimal):
            out[key] = serialize_decimal(value)
        elif isinstance(value, dict):
            out[key] = _jsonable(value)
        else:
            out[key] = value
    return out


def close_day(
    db: Session,
    shop_id: int,
    closing_date: Optional[date] = None,
    opening_cash: Decimal = Decimal("0"),
    closing_cash: Decimal = Decimal("0"),
    notes: Optional[str] = None,
) -> DailyClosing:
    """
    Freeze the day's totals. A day can be closed only once; the stored
    totals do not change if late sales for that date arrive afterwards.
    """
    closing_date = closing_date or datetime.utcnow().date()
    opening_cash = Decimal(str(opening_cash or 0))
    closing_cash = Decimal(str(closing_cash or 0))
    if opening_cash < 0 or closing_cash < 0:
        raise InvalidInput("Cash amounts cannot be negative")

    exists = (
        db.query(DailyClosing.id)
        .filter(DailyClosing.shop_id == shop_id, DailyClosing.closing_date == closing_date)
        .first()
    )
    if exists:
        raise Conflict(f"{closing_date.isoformat()} is already closed")

    totals = get_day_totals(db, shop_id, closing_date)
    closing = DailyClosing(
        shop_id=shop_id,
        closing_date=closing_date,
        opening_cash=opening_cash,
        closing_cash=closing_cash,
        notes=(notes or "").strip() or None,
        totals=_jsonable(totals),
    )
    db.add(closing)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict(f"{closing_date.isoformat()} is already closed")
    db.refresh(closing)
    logger.info("day closed shop_id=%s date=%s", shop_id, closing_date)
    return closing


def list_closings(db: Session, shop_id: int, limit: int = 60) -> List[DailyClosing]:
    return (
        db.query(DailyClosing)
        .filter(DailyClosing.shop_id == shop_id)
        .order_by(DailyClosing.closing_date.desc())
        .limit(limit)
        .all()
    )
