import logging
from datetime import date, timedelta
from typing import Dict, List, Optional

from sqlalchemy import and_, extract, func, update
from sqlalchemy.orm import Session

from app.clock import BusinessClock
from app.models.coupon import Coupon
from app.services.barcode_service import BarcodeService
from app.services.exceptions import AlreadyClaimed, Expired, NotFound

logger = logging.getLogger(__name__)

CLAIMED = "claimed"
EXPIRED = "expired"
AVAILABLE = "available"


def coupon_status(coupon: Coupon, today: date) -> str:
    """Derived status; expiry is never stored."""
    if coupon.is_claimed:
        return CLAIMED
    if coupon.coupon_date < today:
        return EXPIRED
    return AVAILABLE


def expired_filter(today: date):
    return and_(Coupon.is_claimed.is_(False), Coupon.coupon_date < today)


def available_filter(today: date):
    return and_(Coupon.is_claimed.is_(False), Coupon.coupon_date >= today)


def in_month(month: int, year: int):
    return and_(
        extract("month", Coupon.coupon_date) == month,
        extract("year", Coupon.coupon_date) == year,
    )


class CouponService:
    """Claim transition and read-side queries for coupons"""

    @staticmethod
    def get_coupon(db: Session, coupon_id: int) -> Optional[Coupon]:
        return db.get(Coupon, coupon_id)

    @staticmethod
    def get_by_barcode(db: Session, barcode: str) -> Coupon:
        coupon = db.query(Coupon).filter(Coupon.barcode == barcode).first()
        if not coupon:
            raise NotFound("Coupon not found")
        return coupon

    @staticmethod
    def claim(db: Session, coupon_id: int, clock: BusinessClock) -> Coupon:
        coupon = db.get(Coupon, coupon_id)
        if not coupon:
            raise NotFound("Coupon not found")
        if coupon.coupon_date < clock.today():
            raise Expired("Coupon has expired and cannot be claimed")
        if coupon.is_claimed:
            raise AlreadyClaimed("Coupon has already been claimed")

        # Only one of several concurrent claimers can flip the flag
        result = db.execute(
            update(Coupon)
            .where(Coupon.id == coupon_id, Coupon.is_claimed.is_(False))
            .values(is_claimed=True, claimed_at=clock.now())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            db.rollback()
            logger.info("Lost claim race for coupon %s", coupon_id)
            raise AlreadyClaimed("Coupon has already been claimed")

        db.commit()
        db.refresh(coupon)
        logger.info("Coupon %s claimed by employee %s", coupon.id, coupon.employee_id)
        return coupon

    @staticmethod
    def list_for_employee_month(db: Session, employee_id: int, month: int, year: int) -> List[Coupon]:
        return (
            db.query(Coupon)
            .filter(Coupon.employee_id == employee_id, in_month(month, year))
            .order_by(Coupon.coupon_date)
            .all()
        )

    @staticmethod
    def count_for_employee_month(db: Session, employee_id: int, month: int, year: int) -> int:
        return (
            db.query(func.count(Coupon.id))
            .filter(Coupon.employee_id == employee_id, in_month(month, year))
            .scalar()
        )

    @staticmethod
    def summarize(coupons: List[Coupon], today: date) -> Dict[str, int]:
        stats = {"total": len(coupons), CLAIMED: 0, EXPIRED: 0, AVAILABLE: 0}
        for coupon in coupons:
            stats[coupon_status(coupon, today)] += 1
        return stats

    @staticmethod
    def get_statistics(db: Session, clock: BusinessClock) -> Dict:
        today = clock.today()
        day_start = clock.now().replace(hour=0, minute=0, second=0, microsecond=0)

        claimed_today = (
            db.query(func.count(Coupon.id))
            .filter(Coupon.is_claimed.is_(True), Coupon.claimed_at >= day_start)
            .scalar()
        )
        stats = {
            "total_coupons": db.query(func.count(Coupon.id)).scalar(),
            "claimed_today": claimed_today,
            "claimed_this_month": db.query(func.count(Coupon.id))
            .filter(Coupon.is_claimed.is_(True), in_month(today.month, today.year))
            .scalar(),
            "expired_coupons": db.query(func.count(Coupon.id)).filter(expired_filter(today)).scalar(),
            "available_coupons": db.query(func.count(Coupon.id)).filter(available_filter(today)).scalar(),
        }
        recent_claims = (
            db.query(Coupon)
            .filter(Coupon.is_claimed.is_(True))
            .order_by(Coupon.claimed_at.desc())
            .limit(10)
            .all()
        )
        return {"stats": stats, "recent_claims": recent_claims}

    @staticmethod
    def expiring_soon(db: Session, clock: BusinessClock) -> List[Coupon]:
        """Unclaimed coupons whose day starts within the next 24 hours."""
        today = clock.today()
        return (
            db.query(Coupon)
            .filter(
                Coupon.is_claimed.is_(False),
                Coupon.coupon_date > today,
                Coupon.coupon_date <= today + timedelta(days=1),
            )
            .order_by(Coupon.coupon_date, Coupon.id)
            .all()
        )

    @staticmethod
    def count_claimed(db: Session, employee_id: int, month: Optional[int] = None,
                      year: Optional[int] = None) -> int:
        q = db.query(func.count(Coupon.id)).filter(
            Coupon.employee_id == employee_id, Coupon.is_claimed.is_(True)
        )
        if month:
            q = q.filter(extract("month", Coupon.coupon_date) == month)
        if year:
            q = q.filter(extract("year", Coupon.coupon_date) == year)
        return q.scalar()

    @staticmethod
    def ensure_barcode_artifacts(db: Session, coupon: Coupon, renderer: BarcodeService) -> Coupon:
        if coupon.barcode_image_path:
            return coupon
        artifacts = renderer.render(coupon.barcode)
        coupon.barcode_image_path = artifacts.png_path
        coupon.barcode_svg_path = artifacts.svg_path
        coupon.barcode_base64 = artifacts.base64
        db.commit()
        db.refresh(coupon)
        return coupon
