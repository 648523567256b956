"""
Authentication service handling registration, login and password changes.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from facility_booking.core.exceptions import Conflict, NotFound, Unauthenticated
from facility_booking.core.logging import get_logger
from facility_booking.core.metrics import record_login
from facility_booking.core.security import hash_password, verify_password
from facility_booking.models.user import User, UserRole
from facility_booking.schemas.user import UserCreate, UserLogin, PasswordChange
from facility_booking.services import repository

logger = get_logger(__name__)


async def register_user(db: AsyncSession, user_data: UserCreate) -> User:
    """
    Register a new employee account.
    Raises 409 if the employee id already exists. Roles are granted by an admin.
    """
    if await repository.find_user_by_employee_id(db, user_data.employee_id):
        logger.warning("registration_failed", reason="employee_id_exists", employee_id=user_data.employee_id)
        raise Conflict("User already exists.", field="employee_id")

    user = User(
        employee_id=user_data.employee_id,
        name=user_data.name,
        image=user_data.image,
        hashed_password=hash_password(user_data.password),
        role=UserRole.EMPLOYEE,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)

    logger.info("user_registered", user_id=user.id, employee_id=user.employee_id)
    return user


async def authenticate_user(db: AsyncSession, login_data: UserLogin) -> User:
    """
    Check credentials and return the user.
    Raises 401 without revealing whether the employee id exists.
    """
    user = await repository.find_user_by_employee_id(db, login_data.employee_id)

    if not user or not verify_password(login_data.password, user.hashed_password):
        logger.warning("login_failed", employee_id=login_data.employee_id)
        record_login(success=False)
        raise Unauthenticated("Invalid credentials.")

    record_login(success=True)
    logger.info("user_logged_in", user_id=user.id, employee_id=user.employee_id)
    return user


async def change_password(db: AsyncSession, employee_id: int, data: PasswordChange) -> User:
    user = await repository.find_user_by_employee_id(db, employee_id)
    if not user:
        raise NotFound("User does not exist.")

    if not verify_password(data.old_password, user.hashed_password):
        logger.warning("password_change_failed", employee_id=employee_id)
        raise Unauthenticated("Invalid old password.")

    user.hashed_password = hash_password(data.new_password)
    await db.flush()

    logger.info("password_changed", employee_id=employee_id)
    return user
