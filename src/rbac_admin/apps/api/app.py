from fastapi import FastAPI

from rbac_admin.util.logging import configure_logging

from .config import settings
from .envelope import install_envelope
from .routers.activity_logs import activity_log_router
from .routers.permissions import permission_router
from .routers.roles import role_router

configure_logging(humanize=settings.HUMANIZE_LOGS, level=settings.LOG_LEVEL)


def build_app() -> FastAPI:
    app = FastAPI(
        title="RBAC Admin API",
        version="0.1.0",
        description="Manage permissions, roles and the permissions each role holds.",
    )
    install_envelope(app)

    app.include_router(permission_router, prefix=settings.API_PREFIX)
    app.include_router(role_router, prefix=settings.API_PREFIX)
    app.include_router(activity_log_router, prefix=settings.API_PREFIX)

    @app.get("/health", tags=["health"])
    def health():
        return {"status": "ok"}

    return app


app = build_app()
