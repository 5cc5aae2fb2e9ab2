"""User registration with bcrypt password hashing."""


import bcrypt
from sqlalchemy import insert

from shared.models.enums import UserRole
from shared.models.errors import ApiError, ErrorCode
from shared.models.tables import users
from shared.models.user import UserCreate
from shared.services.database import DatabaseService, IntegrityViolationError
from shared.utils.logging import get_logger

logger = get_logger(__name__)

BCRYPT_ROUNDS = 12


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))


class UserService:
    """Creates user accounts."""

    def __init__(self, db: DatabaseService) -> None:
        self._db = db

    def register(self, user: UserCreate) -> int:
        """Hash the password and insert the user.

        Returns:
            New UserID

        Raises:
            ApiError: USER_ALREADY_EXISTS when the username or email is taken.
            DatabaseServiceError: Any other store failure.
        """
        statement = insert(users).values(
            Username=user.username,
            FirstName=user.first_name,
            LastName=user.last_name,
            Email=str(user.email),
            HashedPassword=hash_password(user.password),
            Role=UserRole.CUSTOMER.value,
        )
        try:
            user_id = self._db.insert(statement)
        except IntegrityViolationError as e:
            logger.info("Registration rejected for %s: username or email exists", user.username)
            raise ApiError(code=ErrorCode.USER_ALREADY_EXISTS) from e

        logger.info("User %s registered (id=%s)", user.username, user_id)
        return user_id
