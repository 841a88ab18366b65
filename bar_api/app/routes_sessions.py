"""Routes for opening and closing the bar's fulfilment session."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from .auth import User, require_operator
from .deps import get_order_service, get_session_manager
from .domain import SessionRecord
from .services import OrderService, OrderSessionManager
from .utils.responses import ok

router = APIRouter(prefix="/api/orders")


def _state(session: SessionRecord | None) -> dict:
    is_open = session is not None and session.is_open
    return {"is_open": is_open, "session": session.to_dict() if session else None}


@router.get("/session")
async def get_active_session(
    manager: OrderSessionManager = Depends(get_session_manager),
    user: User = Depends(require_operator),
) -> dict:
    return ok(_state(await manager.get_active()))


@router.post("/session")
async def open_session(
    manager: OrderSessionManager = Depends(get_session_manager),
    user: User = Depends(require_operator),
) -> dict:
    """Open the bar, or return the session that is already open."""

    return ok(_state(await manager.open()))


@router.patch("/session")
async def close_session(
    manager: OrderSessionManager = Depends(get_session_manager),
    user: User = Depends(require_operator),
) -> dict:
    closed = await manager.close()
    return ok(
        {
            "is_open": False,
            "session": closed.to_dict() if closed else None,
        }
    )


@router.get("/sessions")
async def session_history(
    limit: int = Query(30, ge=1, le=100),
    manager: OrderSessionManager = Depends(get_session_manager),
    user: User = Depends(require_operator),
) -> dict:
    summaries = await manager.history(limit)
    return ok({"sessions": [summary.to_dict() for summary in summaries]})


@router.get("/sessions/{session_id}/orders")
async def session_orders(
    session_id: str,
    service: OrderService = Depends(get_order_service),
    user: User = Depends(require_operator),
) -> dict:
    orders = await service.session_orders(session_id)
    return ok({"orders": [order.to_dict() for order in orders]})
