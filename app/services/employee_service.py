import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.models.coupon import Coupon
from app.models.employee import Employee
from app.models.notification import Notification
from app.schemas.employee import EmployeeCreate, EmployeeUpdate
from app.services.barcode_service import BarcodeService
from app.services.exceptions import Conflict, NotFound

logger = logging.getLogger(__name__)


class EmployeeService:
    """Service class for CRUD operations on employees"""

    @staticmethod
    def get_employee(db: Session, employee_id: int) -> Optional[Employee]:
        return db.get(Employee, employee_id)

    @staticmethod
    def exists(db: Session, employee_id: int) -> bool:
        return db.query(Employee.id).filter(Employee.id == employee_id).first() is not None

    @staticmethod
    def list_employees(db: Session, skip: int = 0, limit: int = 100) -> List[Employee]:
        limit = min(max(limit, 1), 500)
        return db.query(Employee).order_by(Employee.id).offset(skip).limit(limit).all()

    @staticmethod
    def count(db: Session) -> int:
        return db.query(Employee).count()

    @staticmethod
    def create_employee(db: Session, data: EmployeeCreate) -> Employee:
        EmployeeService._ensure_unique(db, data.employee_code, data.email)
        employee = Employee(**data.model_dump())
        db.add(employee)
        db.commit()
        db.refresh(employee)
        logger.info("Employee %s (%s) created", employee.id, employee.employee_code)
        return employee

    @staticmethod
    def update_employee(db: Session, employee_id: int, data: EmployeeUpdate) -> Employee:
        employee = db.get(Employee, employee_id)
        if not employee:
            raise NotFound("Employee not found")
        changes = data.model_dump(exclude_unset=True)
        EmployeeService._ensure_unique(
            db, changes.get("employee_code"), changes.get("email"), exclude_id=employee_id
        )
        for key, value in changes.items():
            setattr(employee, key, value)
        db.commit()
        db.refresh(employee)
        return employee

    @staticmethod
    def delete_employee(db: Session, employee_id: int, renderer: BarcodeService) -> None:
        """Deletes the employee with their coupons, notifications and barcode files."""
        employee = db.get(Employee, employee_id)
        if not employee:
            raise NotFound("Employee not found")

        coupons = db.query(Coupon).filter(Coupon.employee_id == employee_id).all()
        paths = []
        for coupon in coupons:
            paths.extend([coupon.barcode_image_path, coupon.barcode_svg_path])
            db.delete(coupon)
        db.query(Notification).filter(Notification.employee_id == employee_id).delete(
            synchronize_session=False
        )
        db.delete(employee)
        db.commit()

        renderer.delete_files(paths)
        logger.info("Employee %s deleted with %d coupons", employee_id, len(coupons))

    @staticmethod
    def _ensure_unique(db: Session, employee_code: Optional[str], email: Optional[str],
                       exclude_id: Optional[int] = None) -> None:
        clauses = []
        if employee_code:
            clauses.append(Employee.employee_code == employee_code)
        if email:
            clauses.append(Employee.email == email)
        if not clauses:
            return
        q = db.query(Employee).filter(or_(*clauses))
        if exclude_id is not None:
            q = q.filter(Employee.id != exclude_id)
        clash = q.first()
        if clash:
            field = "email" if email and clash.email == email else "employee_code"
            raise Conflict(f"An employee with this {field} already exists", {"field": field})
