from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String

from dukan.models.shop import Base


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    shop_id = Column(Integer, ForeignKey("shops.id", ondelete="CASCADE"), nullable=False, index=True)
    description = Column(String(255), nullable=False)
    category = Column(String(100), nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    # Null when the bill carried no itemised GST
    tax_amount = Column(Numeric(12, 2), nullable=True)
    expense_date = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
