from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.employee import EmployeeCount, EmployeeCreate, EmployeeResponse, EmployeeUpdate
from app.services.barcode_service import BarcodeService, get_barcode_service
from app.services.employee_service import EmployeeService
from app.services.exceptions import NotFound

router = APIRouter(prefix="", tags=["employees"])


@router.get("/employees", response_model=List[EmployeeResponse])
def list_employees(skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    return EmployeeService.list_employees(db, skip, limit)


@router.post("/employees", response_model=EmployeeResponse, status_code=201)
def create_employee(payload: EmployeeCreate, db: Session = Depends(get_db)):
    return EmployeeService.create_employee(db, payload)


@router.get("/employee-count", response_model=EmployeeCount)
def employee_count(db: Session = Depends(get_db)):
    return EmployeeCount(total_employees=EmployeeService.count(db))


@router.get("/employees/{employee_id}", response_model=EmployeeResponse)
def get_employee(employee_id: int, db: Session = Depends(get_db)):
    employee = EmployeeService.get_employee(db, employee_id)
    if not employee:
        raise NotFound("Employee not found")
    return employee


@router.put("/employees/{employee_id}", response_model=EmployeeResponse)
def update_employee(employee_id: int, payload: EmployeeUpdate, db: Session = Depends(get_db)):
    return EmployeeService.update_employee(db, employee_id, payload)


@router.delete("/employees/{employee_id}", status_code=204)
def delete_employee(
    employee_id: int,
    db: Session = Depends(get_db),
    renderer: BarcodeService = Depends(get_barcode_service),
):
    EmployeeService.delete_employee(db, employee_id, renderer)
    return
