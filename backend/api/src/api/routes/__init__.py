"""API routes package.

Routers are organized by domain:

- health: Liveness and readiness checks (mounted at the root)
- webhooks: Paystack and Stripe payment webhooks
- applications: Job application submission
- users: User registration

All routers except health are registered in main.py with the /api prefix.
"""

from api.routes.applications import router as applications_router
from api.routes.health import router as health_router
from api.routes.users import router as users_router
from api.routes.webhooks import router as webhooks_router

__all__ = [
    "applications_router",
    "health_router",
    "users_router",
    "webhooks_router",
]
