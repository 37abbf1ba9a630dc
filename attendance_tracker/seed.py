"""Seed default admin user if not present."""
from attendance_tracker.api.deps import get_password_hash
from attendance_tracker.config import settings
from attendance_tracker.models.user import User, UserRole

ADMIN_NAME = "Attendance Admin"


async def seed_admin():
    existing = await User.find_one(User.email == settings.admin_email)
    if existing:
        return
    await User(
        email=settings.admin_email,
        hashed_password=get_password_hash(settings.admin_password),
        role=UserRole.ADMIN,
        name=ADMIN_NAME,
    ).insert()
