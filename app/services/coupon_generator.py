import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.models.coupon import Coupon
from app.models.employee import Employee
from app.services.barcode_service import BarcodeService
from app.services.coupon_service import CouponService
from app.services.exceptions import Conflict, CouponError, IntegrityViolation, NotFound, ValidationError
from app.services.holiday_service import HolidayCalendar
from app.services.identity import IdentityGenerator

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    employee: Employee
    created: List[Coupon] = field(default_factory=list)

    @property
    def sample_coupon(self) -> Optional[Coupon]:
        return self.created[0] if self.created else None


@dataclass
class BulkGenerationResult:
    total_created: int = 0
    processed: int = 0
    skipped: int = 0
    failed: int = 0


class CouponGenerator:
    """
    Issues one coupon per employee per working day of a month.

    Each employee's batch is a single unit of work: it is either committed
    whole or rolled back whole. An employee who already has coupons for the
    month is never topped up.
    """

    def __init__(self, calendar: HolidayCalendar, identity: IdentityGenerator,
                 renderer: BarcodeService, max_attempts: Optional[int] = None):
        self.calendar = calendar
        self.identity = identity
        self.renderer = renderer
        self.max_attempts = max_attempts or settings.GENERATION_MAX_ATTEMPTS

    @staticmethod
    def validate_period(month: int, year: int) -> None:
        if not isinstance(month, int) or not 1 <= month <= 12:
            raise ValidationError("month must be an integer between 1 and 12", {"month": month})
        if not isinstance(year, int) or not settings.MIN_YEAR <= year <= settings.MAX_YEAR:
            raise ValidationError(
                f"year must be between {settings.MIN_YEAR} and {settings.MAX_YEAR}", {"year": year}
            )

    def generate_for_employee(self, db: Session, employee_id: int, month: int, year: int) -> GenerationResult:
        self.validate_period(month, year)
        if db.get(Employee, employee_id) is None:
            raise NotFound("Employee not found", {"employee_id": employee_id})
        return self._generate_batch(db, employee_id, month, year)

    def generate_for_all_employees(self, db: Session, month: int, year: int) -> BulkGenerationResult:
        self.validate_period(month, year)
        employee_ids = [row.id for row in db.query(Employee.id).order_by(Employee.id).all()]
        if not employee_ids:
            raise NotFound("No employees found")

        summary = BulkGenerationResult()
        for employee_id in employee_ids:
            try:
                result = self._generate_batch(db, employee_id, month, year)
            except Conflict:
                summary.skipped += 1
                continue
            except OperationalError:
                raise
            except (CouponError, SQLAlchemyError) as exc:
                logger.error(
                    "Coupon generation failed for employee %s (%02d/%d): %s",
                    employee_id, month, year, exc,
                )
                summary.failed += 1
                continue
            summary.total_created += len(result.created)
            summary.processed += 1

        logger.info(
            "Generated %d coupons for %02d/%d: %d processed, %d skipped, %d failed",
            summary.total_created, month, year, summary.processed, summary.skipped, summary.failed,
        )
        return summary

    def _generate_batch(self, db: Session, employee_id: int, month: int, year: int) -> GenerationResult:
        working_days = self.calendar.working_days_in_month(year, month)

        for attempt in range(1, self.max_attempts + 1):
            # Serializes concurrent generations for the same employee (no-op on SQLite)
            employee = (
                db.query(Employee).filter(Employee.id == employee_id).with_for_update().first()
            )
            if employee is None:
                db.rollback()
                raise NotFound("Employee not found", {"employee_id": employee_id})

            existing = CouponService.count_for_employee_month(db, employee_id, month, year)
            if existing > 0:
                db.rollback()
                raise Conflict(
                    f"Coupons already exist for {employee.display_name} for this month",
                    {"existing_count": existing},
                )

            coupons: List[Coupon] = []
            try:
                reserved = set()
                for day in working_days:
                    barcode = self.identity.generate_barcode(db, reserved)
                    reserved.add(barcode)
                    coupon = Coupon(
                        employee_id=employee_id,
                        coupon_date=day,
                        barcode=barcode,
                        workday_code=self.identity.generate_workday_code(employee_id, day),
                        is_claimed=False,
                    )
                    db.add(coupon)
                    coupons.append(coupon)

                    artifacts = self.renderer.render(barcode)
                    coupon.barcode_image_path = artifacts.png_path
                    coupon.barcode_svg_path = artifacts.svg_path
                    coupon.barcode_base64 = artifacts.base64
                db.commit()
            except IntegrityError:
                self._discard(db, coupons)
                if CouponService.count_for_employee_month(db, employee_id, month, year) > 0:
                    raise Conflict(
                        "Coupons were generated concurrently for this employee and month",
                        {"employee_id": employee_id},
                    )
                logger.warning(
                    "Barcode collision at commit for employee %s (%02d/%d), attempt %d/%d",
                    employee_id, month, year, attempt, self.max_attempts,
                )
                continue
            except OperationalError:
                self._discard(db, coupons)
                logger.exception(
                    "Storage error while generating coupons for employee %s (%02d/%d)",
                    employee_id, month, year,
                )
                raise
            except Exception:
                self._discard(db, coupons)
                logger.exception(
                    "Error generating coupons for employee %s (%02d/%d)", employee_id, month, year
                )
                raise

            logger.info(
                "Generated %d coupons for employee %s (%02d/%d)", len(coupons), employee_id, month, year
            )
            return GenerationResult(employee=employee, created=coupons)

        raise IntegrityViolation(
            f"Could not store a collision-free coupon batch after {self.max_attempts} attempts",
            {"employee_id": employee_id, "month": month, "year": year},
        )

    def _discard(self, db: Session, coupons: List[Coupon]) -> None:
        paths = []
        for coupon in coupons:
            paths.extend([coupon.barcode_image_path, coupon.barcode_svg_path])
        db.rollback()
        self.renderer.delete_files(paths)
