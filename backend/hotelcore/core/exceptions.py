"""
Domain errors raised by the service layer

Each error carries a stable reason code and, where useful, a snapshot of the
room/booking that caused it. The API layer renders them as JSON.
"""
from typing import Any, Dict, Optional


class CoreError(Exception):
    code = "error"
    status_code = 400
    message = "Request failed"

    def __init__(self, message: Optional[str] = None, **details: Any):
        self.message = message or self.message
        self.details: Dict[str, Any] = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body = {"detail": self.message, "code": self.code}
        body.update(self.details)
        return body


# Validation failures

class ValidationFailed(CoreError):
    code = "validation_failed"
    message = "Invalid request"


class CheckInDateInPast(CoreError):
    code = "check_in_date_in_past"
    message = "Check-in date cannot be in the past"


class InvalidStayDates(CoreError):
    code = "invalid_stay_dates"
    message = "Check-out date must be after check-in date"


class HotelNotFound(CoreError):
    code = "hotel_not_found"
    status_code = 404
    message = "Hotel not found"


class RoomNotFound(CoreError):
    code = "room_not_found"
    status_code = 404
    message = "Room not found"


class RoomAlreadyExists(CoreError):
    code = "room_already_exists"
    message = "Room number already exists for this hotel"


class RoomOccupied(CoreError):
    code = "room_occupied"
    status_code = 409
    message = "Room is already occupied"


class RoomUnavailable(CoreError):
    code = "room_unavailable"

    def __init__(self, status: str, **details: Any):
        super().__init__(f"Room is {status} and cannot be checked in", status=status, **details)


class RoomInMaintenance(CoreError):
    code = "room_in_maintenance"
    message = "Room is in maintenance and unavailable"


class RoomNotCheckedIn(CoreError):
    code = "room_not_checked_in"

    def __init__(self, room_number: str, status: str, **details: Any):
        super().__init__(
            f"Room {room_number} is {status}. Only occupied rooms can accept orders. Please check in first.",
            status=status,
            **details,
        )


class NoActiveBooking(CoreError):
    code = "no_active_booking"
    message = "Room is not currently checked in"


class BookingExpired(CoreError):
    code = "booking_expired"
    message = "Room has been checked out"


class PhoneRequired(CoreError):
    code = "phone_required"
    message = "Phone number is required for order verification"


class PhoneMismatch(CoreError):
    code = "phone_mismatch"
    message = "Phone number does not match booking"


class NothingToCheckOut(CoreError):
    code = "nothing_to_check_out"
    message = "Room is not occupied and has no active booking"


class OrderNotFound(CoreError):
    code = "order_not_found"
    status_code = 404
    message = "Order not found"


class InvalidStatusTransition(CoreError):
    code = "invalid_status_transition"
    message = "Order status change is not allowed"


class PromotionNotFound(CoreError):
    code = "promotion_not_found"
    status_code = 404
    message = "Promotion not found"


class FolioNotFound(CoreError):
    code = "folio_not_found"
    status_code = 404
    message = "Folio not found"


class AdjustmentNotFound(CoreError):
    code = "adjustment_not_found"
    status_code = 404
    message = "Adjustment not found"


class PermissionDenied(CoreError):
    code = "forbidden"
    status_code = 403
    message = "Forbidden"


# Consistency failures

class InconsistentState(CoreError):
    code = "inconsistent_state"
    message = "Room status fixed: no active booking found"
