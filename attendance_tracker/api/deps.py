"""Shared dependencies: JWT auth, password hashing, and the lifecycle service."""
from datetime import datetime, timedelta
from typing import Annotated, Optional

import bcrypt
from beanie import PydanticObjectId
from bson.errors import InvalidId
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from attendance_tracker.config import settings
from attendance_tracker.models.user import User, UserRole
from attendance_tracker.services.lifecycle import AttendanceLifecycle
from attendance_tracker.services.stores import MongoHolidayStore, MongoRecordStore, MongoTimetableStore

security = HTTPBearer(auto_error=False)

_lifecycle: Optional[AttendanceLifecycle] = None
_timetable_store: Optional[MongoTimetableStore] = None
_holiday_store: Optional[MongoHolidayStore] = None
_record_store: Optional[MongoRecordStore] = None


def verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def create_access_token(subject: str, role: str) -> str:
    expire = datetime.utcnow() + timedelta(minutes=settings.jwt_access_token_expire_minutes)
    to_encode = {"sub": subject, "role": role, "exp": expire, "type": "access"}
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_refresh_token(subject: str) -> str:
    expire = datetime.utcnow() + timedelta(days=settings.jwt_refresh_token_expire_days)
    to_encode = {"sub": subject, "exp": expire, "type": "refresh"}
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str, expected_type: str) -> str:
    """Return the subject of a valid token of the given type, else raise 401."""
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    if payload.get("type") != expected_type:
        raise HTTPException(status_code=401, detail="Invalid token type")
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token")
    return user_id


async def load_active_user(user_id: str) -> User:
    try:
        user = await User.get(PydanticObjectId(user_id))
    except InvalidId:
        user = None
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="User not found or inactive")
    return user


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> User:
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user_id = decode_token(credentials.credentials, "access")
    return await load_active_user(user_id)


def require_roles(*allowed: UserRole):
    allowed_values = [role.value for role in allowed]

    async def checker(user: Annotated[User, Depends(get_current_user)]):
        if user.role.value not in allowed_values:
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return user

    return checker


def get_record_store() -> MongoRecordStore:
    global _record_store
    if _record_store is None:
        _record_store = MongoRecordStore()
    return _record_store


def get_holiday_store() -> MongoHolidayStore:
    global _holiday_store
    if _holiday_store is None:
        _holiday_store = MongoHolidayStore()
    return _holiday_store


def get_timetable_store() -> MongoTimetableStore:
    global _timetable_store
    if _timetable_store is None:
        _timetable_store = MongoTimetableStore()
    return _timetable_store


def get_lifecycle() -> AttendanceLifecycle:
    global _lifecycle
    if _lifecycle is None:
        _lifecycle = AttendanceLifecycle(
            get_record_store(),
            get_holiday_store(),
            get_timetable_store(),
            tz_name=settings.attendance_timezone,
            catch_up_days=settings.attendance_catch_up_days,
        )
    return _lifecycle


# Type aliases for route injection
CurrentUser = Annotated[User, Depends(get_current_user)]
Lifecycle = Annotated[AttendanceLifecycle, Depends(get_lifecycle)]
Records = Annotated[MongoRecordStore, Depends(get_record_store)]
Holidays = Annotated[MongoHolidayStore, Depends(get_holiday_store)]
Timetable = Annotated[MongoTimetableStore, Depends(get_timetable_store)]
TeacherOrAdmin = Annotated[User, Depends(require_roles(UserRole.TEACHER, UserRole.ADMIN))]
