from sqlalchemy import (
    Column, Integer, String, Text, Boolean, Date, DateTime, ForeignKey, Index, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
from app.models.employee import Employee


class Coupon(Base):
    """
    One meal coupon, valid for a single working day.

    claimed_at is set exactly once, together with is_claimed.
    """
    __tablename__ = "coupons"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False)
    coupon_date = Column(Date, nullable=False, index=True)
    barcode = Column(String(32), nullable=False, unique=True)
    workday_code = Column(String(64), nullable=False)
    is_claimed = Column(Boolean, default=False, nullable=False, index=True)
    claimed_at = Column(DateTime(timezone=True), nullable=True)

    barcode_image_path = Column(String(512), nullable=True)
    barcode_svg_path = Column(String(512), nullable=True)
    barcode_base64 = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    employee = relationship(Employee, lazy="joined")

    __table_args__ = (
        UniqueConstraint("employee_id", "coupon_date", name="uq_coupons_employee_date"),
        Index("ix_coupons_claimed_date", "is_claimed", "coupon_date"),
    )
