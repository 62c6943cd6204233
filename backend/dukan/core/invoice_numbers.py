"""
Server-side invoice numbering, used when a sale arrives without a number.
"""
from sqlalchemy.orm import Session

from dukan.models.invoice_counter import InvoiceCounter
from dukan.models.sale import Sale


def _format(shop_id: int, seq: int) -> str:
    return f"INV-{shop_id}-{str(seq).zfill(6)}"


def get_next_invoice_seq(db: Session, shop_id: int) -> int:
    """
    Return the shop's next free sequence number and advance the counter.

    The counter row is locked with with_for_update() so two registers of the
    same shop cannot draw the same number. Numbers already used by a
    client-supplied invoice are skipped. Does not commit; the caller's
    transaction owns the increment.
    """
    counter = (
        db.query(InvoiceCounter)
        .filter(InvoiceCounter.shop_id == shop_id)
        .with_for_update()
        .first()
    )
    if not counter:
        counter = InvoiceCounter(shop_id=shop_id, next_seq=1)
        db.add(counter)
        db.flush()

    current_seq = counter.next_seq
    while db.query(Sale.id).filter(Sale.invoice_number == _format(shop_id, current_seq)).first():
        current_seq += 1
    counter.next_seq = current_seq + 1
    return current_seq


def generate_invoice_number(db: Session, shop_id: int) -> str:
    """
    Format: INV-{shop_id}-{SEQ:06d}, e.g. 'INV-7-000042'.
    The shop id keeps numbers unique across tenants.
    """
    return _format(shop_id, get_next_invoice_seq(db, shop_id))
