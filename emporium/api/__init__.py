# emporium/api/__init__.py
from fastapi import FastAPI

from emporium.api.routers import carts, health


def include_routers(app: FastAPI) -> FastAPI:
    app.include_router(health.router)
    app.include_router(carts.router)
    return app
