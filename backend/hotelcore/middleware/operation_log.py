"""
Operation log middleware
Records every mutating API call
"""
import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from hotelcore.api.auth import token_identity
from hotelcore.db.database import SessionLocal
from hotelcore.models.operation_log import OperationLog

logger = logging.getLogger(__name__)


class OperationLogMiddleware(BaseHTTPMiddleware):
    """Writes one OperationLog row per POST/PUT/PATCH/DELETE request"""

    LOGGED_METHODS = ("POST", "PUT", "PATCH", "DELETE")

    # Login bodies carry passwords
    EXCLUDED_PATHS = ("/login", "/logout")

    MODULE_MAP = {
        "/api/bookings": "bookings",
        "/api/guest": "guest",
        "/api/orders": "orders",
        "/api/promotions": "promotions",
        "/api/folios": "folios",
        "/api/rooms": "rooms",
    }

    ACTION_MAP = {
        "/check-in": "check-in",
        "/check-out": "check-out",
        "/mark-paid": "mark folio paid",
        "/adjustment": "correct adjustment",
        "/item-discounts": "item discount",
        "/calculate-discount": "price cart",
        "/status": "change status",
        "/api/guest/orders": "submit order",
    }

    METHOD_ACTIONS = {
        "POST": "create",
        "PUT": "update",
        "PATCH": "modify",
        "DELETE": "delete",
    }

    def __init__(self, app, session_factory=None):
        super().__init__(app)
        self.session_factory = session_factory or SessionLocal

    def _module(self, path: str) -> str:
        for prefix, module in self.MODULE_MAP.items():
            if path.startswith(prefix):
                return module
        return "other"

    def _action(self, method: str, path: str) -> str:
        for fragment, action in self.ACTION_MAP.items():
            if fragment in path:
                return action
        return self.METHOD_ACTIONS.get(method, method)

    async def dispatch(self, request: Request, call_next):
        method = request.method
        path = request.url.path
        if method not in self.LOGGED_METHODS or path in self.EXCLUDED_PATHS:
            return await call_next(request)

        start_time = time.time()

        user_id = None
        username = "guest"
        auth_header = request.headers.get("authorization", "")
        if auth_header.lower().startswith("bearer "):
            identity = token_identity(auth_header[7:].strip())
            if identity:
                user_id = identity["user_id"]
                username = identity["username"]

        request_data = None
        body = await request.body()
        if body:
            request_data = body.decode("utf-8", errors="replace")[:2000]

        response = await call_next(request)

        status_code = response.status_code
        log = OperationLog(
            user_id=user_id,
            username=username,
            action=self._action(method, path),
            module=self._module(path),
            method=method,
            path=path,
            ip_address=request.client.host if request.client else None,
            request_data=request_data,
            status_code=status_code,
            error_message=f"HTTP {status_code}" if status_code >= 400 else None,
            execution_time=int((time.time() - start_time) * 1000),
        )

        # Audit failures never affect the response
        db = self.session_factory()
        try:
            db.add(log)
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Failed to write operation log for %s %s", method, path)
        finally:
            db.close()

        return response
