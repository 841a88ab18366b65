"""Ticket rendering, printer queue and QZ Tray signing routes."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from config import get_settings

from .auth import User, require_operator
from .deps import get_order_service
from .errors import UpstreamUnavailableError, ValidationError
from .printing import PAPER_WIDTHS, build_ticket, read_pem_from_env, sign_challenge
from .printing.qz_signing import CERTIFICATE_ENV, PRIVATE_KEY_ENV
from .services import OrderService
from .utils.responses import ok

router = APIRouter()

NO_STORE = {"Cache-Control": "no-store"}


class SignPayload(BaseModel):
    """Challenge sent by QZ Tray."""

    to_sign: str


def _paper(paper: str | None) -> str:
    value = paper or get_settings().ticket_paper
    if value not in PAPER_WIDTHS:
        raise ValidationError("unsupported paper size", {"allowed": sorted(PAPER_WIDTHS)})
    return value


async def _ticket(service: OrderService, order_id: str, paper: str | None) -> tuple[str, bytes]:
    settings = get_settings()
    order = await service.get(order_id)
    data = build_ticket(
        order,
        paper=_paper(paper),
        tz=settings.ticket_timezone,
        currency_symbol=settings.currency_symbol,
    )
    return order.code, data


@router.get("/api/orders/{order_id}/ticket")
async def get_ticket(
    order_id: str,
    paper: str | None = Query(None),
    service: OrderService = Depends(get_order_service),
    user: User = Depends(require_operator),
) -> Response:
    """Return raw ESC/POS bytes for a local print client."""
    code, data = await _ticket(service, order_id, paper)
    return Response(
        content=data,
        media_type="application/octet-stream",
        headers={"Content-Disposition": f'inline; filename="{code}.bin"', **NO_STORE},
    )


@router.post("/api/orders/{order_id}/print", status_code=202)
async def print_order(
    order_id: str,
    request: Request,
    paper: str | None = Query(None),
    service: OrderService = Depends(get_order_service),
    user: User = Depends(require_operator),
) -> dict:
    queue = getattr(request.app.state, "print_queue", None)
    if queue is None:
        raise UpstreamUnavailableError("printer is not configured")
    code, data = await _ticket(service, order_id, paper)
    try:
        pending = queue.submit(code, data)
    except asyncio.QueueFull as exc:
        raise UpstreamUnavailableError("print queue is full") from exc
    return ok({"code": code, "queued": pending})


@router.get("/api/qz/certificate")
async def qz_certificate(user: User = Depends(require_operator)) -> PlainTextResponse:
    cert = read_pem_from_env(CERTIFICATE_ENV)
    if not cert:
        raise UpstreamUnavailableError(f"{CERTIFICATE_ENV} is not configured")
    return PlainTextResponse(cert, headers=NO_STORE)


@router.post("/api/qz/sign")
async def qz_sign(
    payload: SignPayload,
    response: Response,
    user: User = Depends(require_operator),
) -> dict:
    signature = sign_challenge(payload.to_sign, read_pem_from_env(PRIVATE_KEY_ENV))
    response.headers["Cache-Control"] = "no-store"
    return ok({"signature": signature})
