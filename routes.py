# routes.py
from fastapi import FastAPI
from controller.book_controller import book_router


def register_routes(app: FastAPI) -> None:
    """Register & Access control controllers here."""
    app.include_router(book_router)
