"""
Order handling for kitchen, bar and front desk staff
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hotelcore.api.auth import get_current_user
from hotelcore.db.database import get_db
from hotelcore.models.user import User
from hotelcore.notifications.dispatcher import NotificationDispatcher, get_dispatcher
from hotelcore.schemas.order import OrderResponse, OrderStatusUpdate
from hotelcore.services import orders as order_service

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return order_service.get_order(db, order_id)


@router.put("/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    order_id: int,
    request: OrderStatusUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return order_service.update_order_status(db, order_id, request.status, dispatcher)
