from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from dukan.models.shop import Base


class User(Base):
    __tablename__ = "users"
    # Identity is global even though data is shop-scoped
    __table_args__ = (
        UniqueConstraint("username", name="uq_users_username"),
        UniqueConstraint("email", name="uq_users_email"),
    )

    id = Column(Integer, primary_key=True, index=True)
    shop_id = Column(Integer, ForeignKey("shops.id", ondelete="CASCADE"), nullable=False, index=True)
    username = Column(String(100), nullable=False, index=True)
    email = Column(String(255), nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="staff")
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    shop = relationship("Shop")
    staff_detail = relationship(
        "StaffDetail",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )


class StaffDetail(Base):
    __tablename__ = "staff_details"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    designation = Column(String(100), nullable=True)
    phone = Column(String(50), nullable=True)
    joined_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    user = relationship("User", back_populates="staff_detail")
