"""Admin endpoints for cache status and forced refreshes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from ucsc_menu.api.menu_models import RefreshResultModel
from ucsc_menu.services.cache import CacheNotOpenError, RefreshError

if TYPE_CHECKING:
    from ucsc_menu.containers import AppContainer

router = APIRouter(tags=["admin"])


def _get_admin_token(request: Request) -> str | None:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str | None = Depends(_get_admin_token),
) -> None:
    """Ensure requests include the admin token when one is configured."""
    if admin_token is None:
        return
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.patch(
    "/request-refresh",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def request_refresh(request: Request) -> RefreshResultModel:
    """Scrape the site now, regardless of cache age."""
    container: AppContainer = request.app.state.container
    cache = container.menu_cache
    try:
        refreshed = await cache.force_refresh()
    except (CacheNotOpenError, RefreshError) as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
    async with cache.get() as snapshot:
        return RefreshResultModel(refreshed=refreshed, cached_at=snapshot.cached_at)


@router.get("/admin/status", dependencies=[Depends(require_admin)])
async def cache_status(request: Request) -> dict[str, object]:
    """Report cache state and age."""
    container: AppContainer = request.app.state.container
    cache = container.menu_cache
    try:
        async with cache.get() as snapshot:
            return {
                "state": cache.state.value,
                "cached_at": snapshot.cached_at.isoformat(),
                "locations": len(snapshot.locations),
                "needs_refresh": cache.needs_refresh(snapshot),
                "seconds_until_refresh": cache.time_until_refresh().total_seconds(),
            }
    except CacheNotOpenError:
        return {"state": cache.state.value}
