from typing import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from app.core.config import Settings


def get_db(request: Request) -> Generator[Session, None, None]:
    """One session per request from the app's Database handle."""
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
