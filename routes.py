# routes.py
from fastapi import FastAPI
from controller.search_controller import health_router, search_router


def register_routes(app: FastAPI) -> None:
    """Register & Access control controllers here."""
    app.include_router(health_router)
    app.include_router(search_router)
