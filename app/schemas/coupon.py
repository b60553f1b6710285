from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import date, datetime


class EmployeeSummary(BaseModel):
    id: int
    employee_code: str
    display_name: str
    department: str

    model_config = ConfigDict(from_attributes=True)


# Request schemas
class GenerateCouponsRequest(BaseModel):
    employee_id: int = Field(..., gt=0)
    month: int = Field(..., description="1-12")
    year: int


class GenerateAllCouponsRequest(BaseModel):
    month: int = Field(..., description="1-12")
    year: int


# Response schemas
class CouponResponse(BaseModel):
    id: int
    employee_id: int
    coupon_date: date
    barcode: str
    workday_code: str
    is_claimed: bool
    claimed_at: Optional[datetime] = None
    barcode_image_path: Optional[str] = None
    barcode_svg_path: Optional[str] = None
    barcode_base64: Optional[str] = None
    status: Optional[str] = None
    employee: Optional[EmployeeSummary] = None

    model_config = ConfigDict(from_attributes=True)


class CouponStats(BaseModel):
    total: int
    claimed: int
    expired: int
    available: int


class CouponListResponse(BaseModel):
    coupons: List[CouponResponse]
    stats: CouponStats


class GenerateCouponsResponse(BaseModel):
    message: str
    count: int
    employee: str
    month: int
    year: int
    sample_coupon: Optional[CouponResponse] = None


class GenerateAllCouponsResponse(BaseModel):
    message: str
    total_coupons: int
    processed_employees: int
    skipped_employees: int
    failed_employees: int
    month: int
    year: int


class ClaimResponse(BaseModel):
    message: str
    coupon: CouponResponse


class BarcodeResponse(BaseModel):
    barcode_text: str
    barcode_image_path: Optional[str] = None
    barcode_svg_path: Optional[str] = None
    barcode_base64: Optional[str] = None


class DashboardStats(BaseModel):
    total_coupons: int
    claimed_today: int
    claimed_this_month: int
    expired_coupons: int
    available_coupons: int


class StatisticsResponse(BaseModel):
    stats: DashboardStats
    recent_claims: List[CouponResponse]


class ExpiringSoonResponse(BaseModel):
    expiring_count: int
    coupons: List[CouponResponse]


class ClaimedCountResponse(BaseModel):
    employee_id: int
    total_claimed_coupons: int
    month: Optional[int] = None
    year: Optional[int] = None
