from collections.abc import Callable, Generator

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.security import decode_token
from app.db.session import SessionLocal
from app.models.staff import Staff
from app.models.user import User, UserRole

security = HTTPBearer()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        claims = decode_token(credentials.credentials)
    except JWTError as exc:
        raise unauthorized from exc

    user_id = claims.get("sub")
    user = db.get(User, user_id) if user_id else None
    if user is None:
        raise unauthorized
    # Tokens carry the role they were issued for; a changed role needs a fresh login.
    if claims.get("role") != user.role.value:
        raise unauthorized
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is inactive")
    return user


def require_roles(*roles: UserRole) -> Callable[[User], User]:
    allowed = frozenset(roles)

    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return current_user

    return role_checker


def find_staff_for_user(db: Session, user: User) -> Staff | None:
    return db.execute(select(Staff).where(Staff.user_id == user.id)).scalar_one_or_none()


def get_current_staff(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Staff:
    staff = find_staff_for_user(db, current_user)
    if staff is None or not staff.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Staff record not found")
    return staff
