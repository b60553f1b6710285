from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.clock import BusinessClock, get_clock
from app.database import get_db
from app.schemas.notification import NotificationListResponse, NotificationResponse, SweepResponse
from app.services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
def list_notifications(db: Session = Depends(get_db)):
    return NotificationService.list_notifications(db)


@router.post("/generate", response_model=SweepResponse)
def generate_notifications(db: Session = Depends(get_db), clock: BusinessClock = Depends(get_clock)):
    created = NotificationService.run_notification_sweep(db, clock)
    return SweepResponse(message="Notifications generated successfully", created=created)


@router.post("/read-all")
def mark_all_as_read(db: Session = Depends(get_db)):
    updated = NotificationService.mark_all_as_read(db)
    return {"success": True, "updated": updated}


@router.post("/{notification_id}/read", response_model=NotificationResponse)
def mark_as_read(notification_id: int, db: Session = Depends(get_db)):
    return NotificationService.mark_as_read(db, notification_id)


@router.delete("/{notification_id}", status_code=204)
def delete_notification(notification_id: int, db: Session = Depends(get_db)):
    NotificationService.delete_notification(db, notification_id)
    return
