"""FastAPI dependency providers for shared services.

Services are built once in the application lifespan and stored on
``app.state``; these providers hand them to routes. Nothing here is a
module-level singleton, so tests can build an app around their own
database.

Usage in routes:
    from api.dependencies import get_webhook_handler

    @router.post("/paystack/webhook")
    async def paystack_webhook(
        handler: WebhookHandler = Depends(get_webhook_handler),
    ):
        ...

Service Dependency Graph:
    DatabaseService (engine + connection pool)
        ├── OrderPaymentReconciler
        │       └── WebhookHandler
        ├── JobApplicationService
        └── UserService
"""

from fastapi import Request

from shared.config import Settings
from shared.services.application_service import JobApplicationService
from shared.services.database import DatabaseService
from shared.services.user_service import UserService
from shared.services.webhook_handler import WebhookHandler


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> DatabaseService:
    return request.app.state.database


def get_webhook_handler(request: Request) -> WebhookHandler:
    return request.app.state.webhook_handler


def get_application_service(request: Request) -> JobApplicationService:
    return request.app.state.application_service


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service
