"""Basket API routes."""

from typing import List

from fastapi import APIRouter, Depends, Response, WebSocket, WebSocketDisconnect, status

from common.logging_config import get_logger
from catalog.config import SESSION_COOKIE_NAME
from catalog.schemas.basket import BasketReconcileRequest, BasketUpdateRequest
from catalog.schemas.common import ErrorResponse
from catalog.services.basket_service import BasketStore
from catalog.services.catalog_service import CatalogService
from catalog.session import get_basket_store, get_catalog_service, get_session_id
from catalog.utils import parse_flag, parse_int

logger = get_logger(__name__)

router = APIRouter(tags=["Basket"])


@router.get("/api/basket", response_model=List[int])
async def get_basket(
    session_id: str = Depends(get_session_id),
    basket_store: BasketStore = Depends(get_basket_store),
):
    """
    Return the KB numbers in the caller's basket (sorted).

    A session cookie is issued on first contact.
    """
    return sorted(await basket_store.get(session_id))


@router.post("/api/basket", response_model=List[int])
async def update_basket(
    request: BasketUpdateRequest,
    session_id: str = Depends(get_session_id),
    basket_store: BasketStore = Depends(get_basket_store),
):
    """
    Add or remove one KB number.

    Body:
        - kb: KB number (a malformed value leaves the basket untouched)
        - add: true to add; false or missing to remove

    Returns:
        - The full basket after the change
    """
    if request.kb is None:
        logger.warning("Ignoring basket update with malformed kb")
        basket = await basket_store.get(session_id)
    elif request.add:
        basket = await basket_store.add(session_id, request.kb)
    else:
        basket = await basket_store.remove(session_id, request.kb)

    return sorted(basket)


@router.post("/api/basket/reconcile", response_model=List[int])
async def reconcile_basket(
    request: BasketReconcileRequest,
    session_id: str = Depends(get_session_id),
    basket_store: BasketStore = Depends(get_basket_store),
):
    """
    Merge a client-held basket into the server copy.

    Body:
        - kbs: KB numbers held by the client

    Returns:
        - The union of the server basket and kbs
    """
    return sorted(await basket_store.reconcile(session_id, request.kbs))


@router.get(
    "/api/basket/download",
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
)
async def download_basket(
    session_id: str = Depends(get_session_id),
    basket_store: BasketStore = Depends(get_basket_store),
    catalog_service: CatalogService = Depends(get_catalog_service),
):
    """
    Download every file in the basket as one ZIP archive.

    Raises:
        - 404: Basket is empty or none of its files exist
    """
    kbs = await basket_store.get(session_id)
    archive = catalog_service.build_basket_archive(kbs)

    return Response(
        content=archive,
        media_type="application/zip",
        headers={"Content-Disposition": 'attachment; filename="basket.zip"'},
    )


@router.websocket("/ws/basket")
async def basket_updates(websocket: WebSocket):
    """
    Live basket channel for the session in the cookie.

    Sends the current basket on connect and after every change. Incoming
    {"kb": int, "add": bool} messages toggle basket membership with the
    same coercion as POST /api/basket.
    """
    session_id = websocket.cookies.get(SESSION_COOKIE_NAME)
    if not session_id:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    basket_store: BasketStore = websocket.app.state.basket_store
    notifier = websocket.app.state.basket_notifier

    await websocket.accept()
    await notifier.connect(session_id, websocket)
    try:
        await websocket.send_json({
            "event": "basket_snapshot",
            "basket": sorted(await basket_store.get(session_id)),
        })
        while True:
            try:
                message = await websocket.receive_json()
            except ValueError:
                logger.warning("Ignoring malformed basket message")
                continue
            if not isinstance(message, dict):
                continue
            kb = parse_int(message.get("kb"), None)
            if kb is None:
                continue
            if parse_flag(message.get("add"), False):
                await basket_store.add(session_id, kb)
            else:
                await basket_store.remove(session_id, kb)
    except WebSocketDisconnect:
        pass
    finally:
        await notifier.disconnect(session_id, websocket)
