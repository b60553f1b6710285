from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.clock import BusinessClock, get_clock
from app.database import get_db
from app.models.coupon import Coupon
from app.schemas.coupon import (
    BarcodeResponse, ClaimedCountResponse, ClaimResponse, CouponListResponse, CouponResponse,
    ExpiringSoonResponse, GenerateAllCouponsRequest, GenerateAllCouponsResponse,
    GenerateCouponsRequest, GenerateCouponsResponse, StatisticsResponse,
)
from app.services.barcode_service import BarcodeService, get_barcode_service
from app.services.coupon_generator import CouponGenerator
from app.services.coupon_service import CouponService, coupon_status
from app.services.exceptions import NotFound
from app.services.employee_service import EmployeeService
from app.services.holiday_service import HolidayCalendar, get_holiday_calendar
from app.services.identity import IdentityGenerator, get_identity_generator

router = APIRouter(prefix="/coupons", tags=["coupons"])


def get_coupon_generator(
    calendar: HolidayCalendar = Depends(get_holiday_calendar),
    identity: IdentityGenerator = Depends(get_identity_generator),
    renderer: BarcodeService = Depends(get_barcode_service),
) -> CouponGenerator:
    return CouponGenerator(calendar, identity, renderer)


def to_response(coupon: Coupon, today: date) -> CouponResponse:
    out = CouponResponse.model_validate(coupon)
    out.status = coupon_status(coupon, today)
    return out


@router.get("", response_model=CouponListResponse)
def list_coupons(
    employee_id: int = Query(..., gt=0),
    month: int = Query(..., ge=1, le=12),
    year: int = Query(...),
    db: Session = Depends(get_db),
    clock: BusinessClock = Depends(get_clock),
):
    CouponGenerator.validate_period(month, year)
    if not EmployeeService.exists(db, employee_id):
        raise NotFound("Employee not found")
    today = clock.today()
    coupons = CouponService.list_for_employee_month(db, employee_id, month, year)
    return CouponListResponse(
        coupons=[to_response(c, today) for c in coupons],
        stats=CouponService.summarize(coupons, today),
    )


@router.get("/statistics", response_model=StatisticsResponse)
def statistics(db: Session = Depends(get_db), clock: BusinessClock = Depends(get_clock)):
    result = CouponService.get_statistics(db, clock)
    today = clock.today()
    return StatisticsResponse(
        stats=result["stats"],
        recent_claims=[to_response(c, today) for c in result["recent_claims"]],
    )


@router.get("/expiring-soon", response_model=ExpiringSoonResponse)
def expiring_soon(db: Session = Depends(get_db), clock: BusinessClock = Depends(get_clock)):
    coupons = CouponService.expiring_soon(db, clock)
    today = clock.today()
    return ExpiringSoonResponse(
        expiring_count=len(coupons), coupons=[to_response(c, today) for c in coupons]
    )


@router.get("/claimed-count", response_model=ClaimedCountResponse)
def claimed_count(
    employee_id: int = Query(..., gt=0),
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    if not EmployeeService.exists(db, employee_id):
        raise NotFound("Employee not found")
    total = CouponService.count_claimed(db, employee_id, month, year)
    return ClaimedCountResponse(
        employee_id=employee_id, total_claimed_coupons=total, month=month, year=year
    )


@router.post("/generate", response_model=GenerateCouponsResponse, status_code=201)
def generate_coupons(
    payload: GenerateCouponsRequest,
    db: Session = Depends(get_db),
    clock: BusinessClock = Depends(get_clock),
    generator: CouponGenerator = Depends(get_coupon_generator),
):
    result = generator.generate_for_employee(db, payload.employee_id, payload.month, payload.year)
    sample = result.sample_coupon
    return GenerateCouponsResponse(
        message="Coupons generated successfully with barcodes",
        count=len(result.created),
        employee=result.employee.display_name,
        month=payload.month,
        year=payload.year,
        sample_coupon=to_response(sample, clock.today()) if sample else None,
    )


@router.post("/generate-all", response_model=GenerateAllCouponsResponse)
def generate_coupons_for_all(
    payload: GenerateAllCouponsRequest,
    db: Session = Depends(get_db),
    generator: CouponGenerator = Depends(get_coupon_generator),
):
    summary = generator.generate_for_all_employees(db, payload.month, payload.year)
    return GenerateAllCouponsResponse(
        message="Coupons generated successfully for all employees with barcodes",
        total_coupons=summary.total_created,
        processed_employees=summary.processed,
        skipped_employees=summary.skipped,
        failed_employees=summary.failed,
        month=payload.month,
        year=payload.year,
    )


@router.get("/scan/{barcode}", response_model=CouponResponse)
def scan_coupon(barcode: str, db: Session = Depends(get_db), clock: BusinessClock = Depends(get_clock)):
    return to_response(CouponService.get_by_barcode(db, barcode), clock.today())


@router.get("/{coupon_id}/barcode", response_model=BarcodeResponse)
def get_barcode(
    coupon_id: int,
    db: Session = Depends(get_db),
    renderer: BarcodeService = Depends(get_barcode_service),
):
    coupon = CouponService.get_coupon(db, coupon_id)
    if not coupon:
        raise NotFound("Coupon not found")
    coupon = CouponService.ensure_barcode_artifacts(db, coupon, renderer)
    return BarcodeResponse(
        barcode_text=coupon.barcode,
        barcode_image_path=coupon.barcode_image_path,
        barcode_svg_path=coupon.barcode_svg_path,
        barcode_base64=coupon.barcode_base64,
    )


@router.post("/{coupon_id}/claim", response_model=ClaimResponse)
def claim_coupon(coupon_id: int, db: Session = Depends(get_db), clock: BusinessClock = Depends(get_clock)):
    coupon = CouponService.claim(db, coupon_id, clock)
    return ClaimResponse(message="Coupon claimed successfully", coupon=to_response(coupon, clock.today()))
