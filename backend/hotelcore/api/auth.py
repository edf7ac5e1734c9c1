"""
Staff authentication
"""
import logging
import secrets
from typing import Optional

import bcrypt
from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from hotelcore.core import clock
from hotelcore.db.database import get_db
from hotelcore.models.user import User, ROLE_ADMIN, ROLE_SUPER_ADMIN
from hotelcore.schemas.user import LoginRequest, LoginResponse, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["auth"])  # no /api prefix, the staff app calls /login directly
security = HTTPBearer(auto_error=False)

# In-memory token store: token -> {"user_id", "username", "created_at"}
tokens = {}


def get_password_hash(password: str) -> str:
    # bcrypt only looks at the first 72 bytes
    if len(password.encode('utf-8')) > 72:
        password = password[:72]
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if len(plain_password.encode('utf-8')) > 72:
        plain_password = plain_password[:72]
    return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))


def issue_token(user: User) -> str:
    token = secrets.token_urlsafe(32)
    tokens[token] = {
        "user_id": user.id,
        "username": user.username,
        "created_at": clock.utcnow(),
    }
    return token


def token_identity(token: Optional[str]) -> Optional[dict]:
    """Token owner, used by the audit middleware"""
    if not token:
        return None
    return tokens.get(token)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None or credentials.credentials not in tokens:
        raise HTTPException(status_code=401, detail="Not authenticated")
    user_id = tokens[credentials.credentials]["user_id"]
    user = User.live(db).filter(User.id == user_id).first()
    if not user:
        tokens.pop(credentials.credentials, None)
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def require_role(*roles: str):
    """Dependency factory restricting an endpoint to the given roles"""
    def checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(status_code=403, detail="Forbidden: insufficient permissions")
        return user
    return checker


require_admin = require_role(ROLE_ADMIN, ROLE_SUPER_ADMIN)
require_super_admin = require_role(ROLE_SUPER_ADMIN)


@router.post("/login", response_model=LoginResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    user = User.live(db).filter(User.username == request.username).first()
    if not user or not verify_password(request.password, user.password_hash):
        logger.warning("Failed login for %s", request.username)
        raise HTTPException(status_code=401, detail="Invalid username or password")

    token = issue_token(user)
    logger.info("User %s logged in", user.username)
    return LoginResponse(accessToken=token, username=user.username, role=user.role)


@router.post("/logout")
def logout(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)):
    if credentials is not None:
        tokens.pop(credentials.credentials, None)
    return {"message": "Logged out"}


@router.get("/me", response_model=UserResponse)
def me(user: User = Depends(get_current_user)):
    return user
