"""FastAPI application factory."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, suppress
from datetime import date

from fastapi import FastAPI, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from ucsc_menu.api.admin import router as admin_router
from ucsc_menu.api.menu_models import (
    LocationMenusModel,
    LocationSummaryModel,
    location_menus_model,
    location_summary_model,
)
from ucsc_menu.app_logging import configure_logging
from ucsc_menu.containers import AppContainer
from ucsc_menu.domain.locations import DateRange
from ucsc_menu.domain.menus import AllergenSet, MealType, allergens_from_names
from ucsc_menu.services.cache import CacheNotOpenError, RefreshError
from ucsc_menu.services.query import FoodItemFilter, MenuQuery


def create_app(container: AppContainer, *, background_refresh: bool = True) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        cache = app.state.container.menu_cache
        try:
            await cache.open()
        except RefreshError:
            logger.exception("Initial menu load failed; retrying in the background")
        refresher = None
        if background_refresh:
            refresher = asyncio.create_task(cache.run_refresh_loop())
        yield
        if refresher is not None:
            refresher.cancel()
            with suppress(asyncio.CancelledError):
                await refresher
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.exception_handler(CacheNotOpenError)
    async def cache_not_open(_request: Request, _exc: CacheNotOpenError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Menu data is not loaded yet"},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/locations")
    async def list_locations(
        request: Request, ids: list[str] | None = Query(default=None)
    ) -> list[LocationSummaryModel]:
        """List dining locations in directory order."""
        state_container: AppContainer = request.app.state.container
        locations = await state_container.query_service.list_locations(
            tuple(ids) if ids else None
        )
        return [location_summary_model(location) for location in locations]

    @app.get("/menus")
    async def list_menus(  # noqa: PLR0913
        request: Request,
        ids: list[str] | None = Query(default=None),
        start: date | None = None,
        end: date | None = None,
        meal_type: str | None = None,
        name_contains: str | None = None,
        contains_all: list[str] | None = Query(default=None),
        contains_any: list[str] | None = Query(default=None),
        excludes_all: list[str] | None = Query(default=None),
    ) -> list[LocationMenusModel]:
        """Return menus for every matching location."""
        state_container: AppContainer = request.app.state.container
        query = _build_query(
            tuple(ids) if ids else None,
            start,
            end,
            meal_type,
            name_contains,
            contains_all,
            contains_any,
            excludes_all,
        )
        results = await state_container.query_service.query(query)
        return [location_menus_model(location, menus) for location, menus in results]

    @app.get("/locations/{location_id}/menus")
    async def location_menus(  # noqa: PLR0913
        location_id: str,
        request: Request,
        start: date | None = None,
        end: date | None = None,
        meal_type: str | None = None,
        name_contains: str | None = None,
        contains_all: list[str] | None = Query(default=None),
        contains_any: list[str] | None = Query(default=None),
        excludes_all: list[str] | None = Query(default=None),
    ) -> LocationMenusModel:
        """Return one location's menus with optional filters."""
        state_container: AppContainer = request.app.state.container
        query = _build_query(
            (location_id,),
            start,
            end,
            meal_type,
            name_contains,
            contains_all,
            contains_any,
            excludes_all,
        )
        results = await state_container.query_service.query(query)
        if not results:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        location, menus = results[0]
        return location_menus_model(location, menus)

    @app.get("/locations/{location_id}")
    async def location_detail(location_id: str, request: Request) -> LocationMenusModel:
        """Return one location with all of its cached menus."""
        state_container: AppContainer = request.app.state.container
        location = await state_container.query_service.get_location(location_id)
        if location is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return location_menus_model(location, list(location.menus()))

    return app


def _build_query(  # noqa: PLR0913
    ids: tuple[str, ...] | None,
    start: date | None,
    end: date | None,
    meal_type: str | None,
    name_contains: str | None,
    contains_all: list[str] | None,
    contains_any: list[str] | None,
    excludes_all: list[str] | None,
) -> MenuQuery:
    """Translate query string parameters into a MenuQuery."""
    food_filter = FoodItemFilter(
        contains_all=_allergen_param(contains_all),
        contains_any=_allergen_param(contains_any),
        excludes_all=_allergen_param(excludes_all),
        name_contains=name_contains,
    )
    date_range = DateRange(start, end) if start or end else None
    return MenuQuery(
        location_ids=ids,
        date_range=date_range,
        meal_type=_meal_type_param(meal_type),
        food_filter=food_filter,
    )


def _allergen_param(values: list[str] | None) -> AllergenSet | None:
    if not values:
        return None
    names = [name for value in values for name in value.split(",") if name.strip()]
    try:
        return allergens_from_names(names)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc


def _meal_type_param(value: str | None) -> MealType | None:
    if not value:
        return None
    key = value.strip().upper().replace(" ", "_")
    try:
        return MealType[key]
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown meal type: {value}",
        ) from exc
