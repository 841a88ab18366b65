"""Public, priced menu for the ordering page."""

from __future__ import annotations

import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from redis.exceptions import RedisError

from config import get_settings

from .deps import get_catalog_repo
from .repos import CatalogRepo
from .services import has_changes, load_snapshot, parse_since, public_menu
from .utils.responses import ok

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/api/public-menu")
async def get_public_menu(
    request: Request,
    since: Optional[str] = Query(None),
    repo: CatalogRepo = Depends(get_catalog_repo),
):
    """Return visible drinks with their current price.

    Responds 304 when ``since`` is not older than the catalog watermark. The
    priced payload is cached in Redis per watermark, so an edit to the
    catalog is visible on the next request.
    """
    snapshot = await load_snapshot(repo)
    if not has_changes(snapshot.updated_at, parse_since(since)):
        return Response(status_code=304)

    updated_at = snapshot.updated_at.isoformat() if snapshot.updated_at else None
    redis = getattr(request.app.state, "redis", None)
    cache_key = f"public-menu:{updated_at}"
    if redis is not None:
        try:
            cached = await redis.get(cache_key)
        except RedisError as exc:
            logger.warning("public menu cache read failed: %s", exc)
            cached = None
        if cached:
            return ok(json.loads(cached))

    data = {"drinks": public_menu(snapshot), "updated_at": updated_at}
    if redis is not None:
        try:
            await redis.set(
                cache_key, json.dumps(data), ex=get_settings().public_menu_cache_secs
            )
        except RedisError as exc:
            logger.warning("public menu cache write failed: %s", exc)
    return ok(data)
