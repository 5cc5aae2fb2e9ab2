"""User registration endpoint."""

from fastapi import APIRouter, Depends
from starlette.status import HTTP_201_CREATED

from api.dependencies import get_user_service
from shared.models.errors import ToolError
from shared.models.user import UserCreate, UserResult
from shared.services.user_service import UserService

router = APIRouter(tags=["users"])


@router.post(
    "/register",
    summary="Register a user account",
    response_model=UserResult,
    status_code=HTTP_201_CREATED,
    responses={
        409: {"description": "Username or email already exists", "model": ToolError},
        500: {"description": "User could not be saved", "model": ToolError},
    },
)
def register(
    body: UserCreate,
    service: UserService = Depends(get_user_service),
) -> UserResult:
    """Create a user with a bcrypt-hashed password."""
    return UserResult(user_id=service.register(body))
