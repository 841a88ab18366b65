"""Order creation, listing and status routes."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Response
from pydantic import BaseModel

from .auth import User, require_operator
from .deps import get_order_service
from .services import OrderService
from .utils.responses import ok

router = APIRouter(prefix="/api/orders")


class StatusUpdate(BaseModel):
    """Payload for changing an order's status."""

    status: str


@router.post("")
async def create_order(
    payload: dict[str, Any] = Body(...),
    service: OrderService = Depends(get_order_service),
) -> dict:
    """Place an order from the public menu.

    The body carries ``items`` plus optional customer fields and the
    ``table_code``/``table_token`` pair from a table QR link.
    """

    order = await service.create_order(payload)
    return ok({"order": order.to_dict()})


@router.get("")
async def list_orders(
    status: Optional[str] = Query(None),
    since: Optional[str] = Query(None),
    service: OrderService = Depends(get_order_service),
    user: User = Depends(require_operator),
):
    page = await service.list_orders(status, since)
    if page is None:
        return Response(status_code=304)
    return ok(
        {
            "orders": [order.to_dict() for order in page.orders],
            "updated_at": page.updated_at.isoformat() if page.updated_at else None,
        }
    )


@router.get("/{order_id}")
async def get_order(
    order_id: str,
    service: OrderService = Depends(get_order_service),
    user: User = Depends(require_operator),
) -> dict:
    order = await service.get(order_id)
    return ok({"order": order.to_dict()})


@router.patch("/{order_id}/status")
async def update_status(
    order_id: str,
    payload: StatusUpdate,
    service: OrderService = Depends(get_order_service),
    user: User = Depends(require_operator),
) -> dict:
    order = await service.update_status(order_id, payload.status)
    return ok({"order": order.to_dict()})
