from reelpicks.adapters.inbound.rest.routers import (
    health_router,
    providers_router,
    recommendations_router,
)

__all__ = ["health_router", "providers_router", "recommendations_router"]
