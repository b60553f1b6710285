import logging
import secrets
from datetime import date
from typing import Collection, Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.models.coupon import Coupon
from app.services.exceptions import IntegrityViolation

logger = logging.getLogger(__name__)

BARCODE_PREFIX = "MC"
WORKDAY_PREFIX = "WD"

_rng = secrets.SystemRandom()


class IdentityGenerator:
    """Barcodes (globally unique) and workday codes (display only) for coupons."""

    def __init__(self, rng=None, max_attempts: Optional[int] = None):
        self.rng = rng or _rng
        self.max_attempts = max_attempts or settings.BARCODE_MAX_ATTEMPTS

    def _candidate_barcode(self) -> str:
        return f"{BARCODE_PREFIX}{self.rng.randint(1, 99_999_999):08d}"

    def generate_barcode(self, db: Session, reserved: Collection[str] = ()) -> str:
        """
        Draw barcodes until one is free in the coupon store and not already
        taken by the batch being built (``reserved``).

        The unique constraint on coupons.barcode still gates the final insert.
        """
        for _ in range(self.max_attempts):
            candidate = self._candidate_barcode()
            if candidate in reserved:
                continue
            taken = db.query(Coupon.id).filter(Coupon.barcode == candidate).first()
            if taken is None:
                return candidate
        logger.error("No free barcode after %d attempts", self.max_attempts)
        raise IntegrityViolation(
            f"Could not generate a unique barcode after {self.max_attempts} attempts"
        )

    def generate_workday_code(self, employee_id: int, d: date) -> str:
        return f"{WORKDAY_PREFIX}{employee_id}{d:%Y%m%d}{self.rng.randint(100, 999)}"


def get_identity_generator() -> IdentityGenerator:
    return IdentityGenerator()
