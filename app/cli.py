"""
Entry points for scheduled jobs.

    python -m app.cli notifications
    python -m app.cli generate --month 3 --year 2025 [--employee-id 7]

Cron runs ``notifications`` every minute; each rule emits at most one alert
per scope per business day, so repeated runs are harmless.
"""
import argparse
import logging
import sys

from app.clock import get_clock
from app.config import settings
from app.database import Base, SessionLocal, engine
from app.models import coupon, employee, notification  # noqa: F401
from app.services.barcode_service import get_barcode_service
from app.services.coupon_generator import CouponGenerator
from app.services.exceptions import CouponError
from app.services.holiday_service import get_holiday_calendar
from app.services.identity import get_identity_generator
from app.services.notification_service import NotificationService

logger = logging.getLogger("app.cli")


def run_notifications(args) -> int:
    with SessionLocal() as db:
        created = NotificationService.run_notification_sweep(db, get_clock())
    print(f"Notifications generated: {len(created)}")
    return 0


def run_generate(args) -> int:
    generator = CouponGenerator(get_holiday_calendar(), get_identity_generator(), get_barcode_service())
    with SessionLocal() as db:
        try:
            if args.employee_id:
                result = generator.generate_for_employee(db, args.employee_id, args.month, args.year)
                print(f"Generated {len(result.created)} coupons for {result.employee.display_name}")
            else:
                summary = generator.generate_for_all_employees(db, args.month, args.year)
                print(
                    f"Generated {summary.total_created} coupons: {summary.processed} processed, "
                    f"{summary.skipped} skipped, {summary.failed} failed"
                )
        except CouponError as exc:
            logger.error("Coupon generation failed: %s", exc.detail)
            print(f"Error: {exc.detail}", file=sys.stderr)
            return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="app.cli", description="Meal coupon maintenance jobs")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("notifications", help="Run one notification sweep")
    p.set_defaults(func=run_notifications)

    p = sub.add_parser("generate", help="Generate coupons for a month")
    p.add_argument("--month", type=int, required=True)
    p.add_argument("--year", type=int, required=True)
    p.add_argument("--employee-id", type=int, default=None)
    p.set_defaults(func=run_generate)
    return parser


def main(argv=None) -> int:
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = build_parser().parse_args(argv)
    Base.metadata.create_all(bind=engine)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
