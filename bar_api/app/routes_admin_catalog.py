"""Operator routes for the catalog document."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends

from .auth import User, require_operator
from .deps import get_catalog_repo
from .repos import CatalogRepo
from .services import load_snapshot, pricing_report, replace_catalog
from .utils.responses import ok

router = APIRouter(prefix="/api/admin/catalog")


@router.get("")
async def get_catalog(
    repo: CatalogRepo = Depends(get_catalog_repo),
    user: User = Depends(require_operator),
) -> dict:
    snapshot = await load_snapshot(repo)
    return ok(
        {
            "catalog": snapshot.document.model_dump(mode="json"),
            "updated_at": snapshot.updated_at.isoformat() if snapshot.updated_at else None,
        }
    )


@router.put("")
async def put_catalog(
    payload: Any = Body(...),
    repo: CatalogRepo = Depends(get_catalog_repo),
    user: User = Depends(require_operator),
) -> dict:
    """Replace the whole catalog; invalid documents are rejected untouched."""

    snapshot = await replace_catalog(repo, payload)
    return ok(
        {
            "ingredients": len(snapshot.document.ingredients),
            "drinks": len(snapshot.document.drinks),
            "updated_at": snapshot.updated_at.isoformat() if snapshot.updated_at else None,
        }
    )


@router.get("/pricing")
async def get_pricing(
    repo: CatalogRepo = Depends(get_catalog_repo),
    user: User = Depends(require_operator),
) -> dict:
    """Live cost and price candidates per drink, for the admin screens only."""

    snapshot = await load_snapshot(repo)
    return ok({"drinks": pricing_report(snapshot)})
