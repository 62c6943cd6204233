from sqlalchemy import Column, Integer, Date, DateTime, ForeignKey, Numeric, String, UniqueConstraint, JSON
from datetime import datetime
from dukan.models.shop import Base


class DailyClosing(Base):
    __tablename__ = "daily_closings"
    __table_args__ = (
        UniqueConstraint("shop_id", "closing_date", name="uq_daily_closing_shop_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    shop_id = Column(Integer, ForeignKey("shops.id", ondelete="CASCADE"), nullable=False, index=True)
    closing_date = Column(Date, nullable=False, index=True)
    opening_cash = Column(Numeric(12, 2), nullable=False, default=0)
    closing_cash = Column(Numeric(12, 2), nullable=False, default=0)
    notes = Column(String(500), nullable=True)
    totals = Column(JSON, nullable=False)  # day's figures as they were at closing time
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
