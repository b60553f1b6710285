from typing import Any, Dict, Optional


class CouponError(Exception):
    """Base class for domain errors; routers turn these into JSON error responses."""

    status_code = 400

    def __init__(self, detail: str, extra: Optional[Dict[str, Any]] = None):
        super().__init__(detail)
        self.detail = detail
        self.extra = extra or {}


class ValidationError(CouponError):
    status_code = 422


class NotFound(CouponError):
    status_code = 404


class Conflict(CouponError):
    status_code = 409


class AlreadyClaimed(Conflict):
    pass


class Expired(CouponError):
    status_code = 409


class IntegrityViolation(CouponError):
    status_code = 500
