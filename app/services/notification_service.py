import logging
from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from app.clock import BusinessClock
from app.models.coupon import Coupon
from app.models.employee import Employee
from app.models.notification import Notification
from app.services.exceptions import NotFound

logger = logging.getLogger(__name__)

LOW_CLAIM_RATE = 70.0
ACHIEVEMENT_MIN_COUPONS = 5


def _claim_rate(claimed, total) -> float:
    return (claimed or 0) / total * 100 if total else 0.0


class NotificationService:
    """Derives alerts from coupon data; at most one per (type, scope, day)."""

    @staticmethod
    def run_notification_sweep(db: Session, clock: BusinessClock) -> List[Notification]:
        today = clock.today()
        created = []
        created += NotificationService._check_expiring_coupons(db, clock, today)
        created += NotificationService._check_low_performing_departments(db, clock, today)
        created += NotificationService._check_achievements(db, clock, today)
        db.commit()
        for notification in created:
            db.refresh(notification)
        logger.info("Notification sweep for %s created %d notifications", today, len(created))
        return created

    @staticmethod
    def _exists(db: Session, type_: str, today: date, department: Optional[str] = None,
                employee_id: Optional[int] = None) -> bool:
        q = db.query(Notification.id).filter(
            Notification.type == type_, Notification.notification_date == today
        )
        if department is not None:
            q = q.filter(Notification.department == department)
        if employee_id is not None:
            q = q.filter(Notification.employee_id == employee_id)
        return q.first() is not None

    @staticmethod
    def _add(db: Session, clock: BusinessClock, today: date, **fields) -> Notification:
        notification = Notification(notification_date=today, read=False, created_at=clock.now(), **fields)
        db.add(notification)
        return notification

    @staticmethod
    def _check_expiring_coupons(db: Session, clock: BusinessClock, today: date) -> List[Notification]:
        expiring = (
            db.query(func.count(Coupon.id))
            .filter(
                Coupon.is_claimed.is_(False),
                Coupon.coupon_date > today,
                Coupon.coupon_date <= today + timedelta(days=1),
            )
            .scalar()
        )
        if not expiring or NotificationService._exists(db, "coupon_expiry", today):
            return []
        return [NotificationService._add(
            db, clock, today,
            type="coupon_expiry",
            title="Coupons Expiring Soon",
            message=f"{expiring} coupons will expire within 24 hours",
            priority="high",
            data={"count": expiring},
        )]

    @staticmethod
    def _claimed_total_columns():
        claimed = func.sum(case((Coupon.is_claimed.is_(True), 1), else_=0)).label("claimed")
        total = func.count(Coupon.id).label("total")
        return claimed, total

    @staticmethod
    def _check_low_performing_departments(db: Session, clock: BusinessClock, today: date) -> List[Notification]:
        claimed, total = NotificationService._claimed_total_columns()
        rows = (
            db.query(Employee.department, claimed, total)
            .join(Coupon, Coupon.employee_id == Employee.id)
            .group_by(Employee.department)
            .all()
        )
        created = []
        for row in rows:
            rate = _claim_rate(row.claimed, row.total)
            if rate >= LOW_CLAIM_RATE:
                continue
            if NotificationService._exists(db, "department_alert", today, department=row.department):
                continue
            created.append(NotificationService._add(
                db, clock, today,
                type="department_alert",
                title="Department Performance Alert",
                message=f"{row.department} has a low claim rate of {round(rate, 1)}%",
                priority="medium",
                department=row.department,
                data={"claim_rate": round(rate, 1)},
            ))
        return created

    @staticmethod
    def _check_achievements(db: Session, clock: BusinessClock, today: date) -> List[Notification]:
        claimed, total = NotificationService._claimed_total_columns()
        rows = (
            db.query(Employee.id, Employee.first_name, Employee.last_name, Employee.department, claimed, total)
            .join(Coupon, Coupon.employee_id == Employee.id)
            .group_by(Employee.id, Employee.first_name, Employee.last_name, Employee.department)
            .all()
        )
        created = []
        for row in rows:
            if row.total < ACHIEVEMENT_MIN_COUPONS or row.claimed != row.total:
                continue
            if NotificationService._exists(db, "achievement", today, employee_id=row.id):
                continue
            created.append(NotificationService._add(
                db, clock, today,
                type="achievement",
                title="Perfect Claim Rate Achievement",
                message=(
                    f"{row.first_name} {row.last_name} from {row.department} "
                    "has achieved 100% claim rate!"
                ),
                priority="low",
                employee_id=row.id,
                department=row.department,
                data={"claim_rate": 100, "total_coupons": row.total},
            ))
        return created

    @staticmethod
    def list_notifications(db: Session) -> dict:
        notifications = db.query(Notification).order_by(Notification.created_at.desc(), Notification.id.desc()).all()
        unread = db.query(func.count(Notification.id)).filter(Notification.read.is_(False)).scalar()
        return {"notifications": notifications, "unread_count": unread}

    @staticmethod
    def mark_as_read(db: Session, notification_id: int) -> Notification:
        notification = db.get(Notification, notification_id)
        if not notification:
            raise NotFound("Notification not found")
        notification.read = True
        db.commit()
        db.refresh(notification)
        return notification

    @staticmethod
    def mark_all_as_read(db: Session) -> int:
        updated = (
            db.query(Notification)
            .filter(Notification.read.is_(False))
            .update({Notification.read: True}, synchronize_session=False)
        )
        db.commit()
        return updated

    @staticmethod
    def delete_notification(db: Session, notification_id: int) -> None:
        notification = db.get(Notification, notification_id)
        if not notification:
            raise NotFound("Notification not found")
        db.delete(notification)
        db.commit()
