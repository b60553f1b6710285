from sqlalchemy import Column, Integer, String, Text, Boolean, Date, DateTime, Enum, ForeignKey, JSON, Index
from sqlalchemy.sql import func
from app.database import Base

NotificationTypes = ("coupon_expiry", "department_alert", "achievement")
Priorities = ("low", "medium", "high")


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(Enum(*NotificationTypes, name="notification_type"), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    priority = Column(Enum(*Priorities, name="notification_priority"), default="medium", nullable=False)
    department = Column(String(255), nullable=True)
    employee_id = Column(Integer, ForeignKey("employees.id", ondelete="CASCADE"), nullable=True)
    data = Column(JSON, nullable=True)
    read = Column(Boolean, default=False, nullable=False)
    # Business calendar day this alert belongs to (dedup key with type + scope)
    notification_date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("ix_notifications_read_created", "read", "created_at"),
        Index("ix_notifications_type_date", "type", "notification_date"),
    )
