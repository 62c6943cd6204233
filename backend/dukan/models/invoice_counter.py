from sqlalchemy import Column, Integer, ForeignKey
from dukan.models.shop import Base


class InvoiceCounter(Base):
	__tablename__ = "invoice_counters"

	id = Column(Integer, primary_key=True, index=True)
	shop_id = Column(Integer, ForeignKey("shops.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
	next_seq = Column(Integer, nullable=False, default=1)
