"""Session cookie handling and request-scoped dependencies."""

import uuid

from fastapi import Request, Response

from catalog.config import SESSION_COOKIE_NAME
from catalog.services.basket_service import BasketStore
from catalog.services.catalog_service import CatalogService


def get_session_id(request: Request, response: Response) -> str:
    """
    FastAPI dependency returning the caller's session id.

    A new id is issued as a cookie on first contact and reused for the
    life of the client session.
    """
    session_id = request.cookies.get(SESSION_COOKIE_NAME)
    if not session_id:
        session_id = str(uuid.uuid4())
        response.set_cookie(SESSION_COOKIE_NAME, session_id, httponly=True, samesite="lax")
    return session_id


def get_basket_store(request: Request) -> BasketStore:
    return request.app.state.basket_store


def get_catalog_service(request: Request) -> CatalogService:
    return request.app.state.catalog_service
