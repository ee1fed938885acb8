"""Pydantic response models for the menu API."""

import datetime

from pydantic import BaseModel

from ucsc_menu.domain.locations import Location
from ucsc_menu.domain.menus import (
    DailyMenu,
    FoodItem,
    Meal,
    MealSection,
    allergen_names,
    format_price,
)


class FoodItemModel(BaseModel):
    name: str
    allergens: list[str]
    price: str | None = None


class MealSectionModel(BaseModel):
    name: str
    food_items: list[FoodItemModel]


class MealModel(BaseModel):
    meal_type: str
    sections: list[MealSectionModel]


class DailyMenuModel(BaseModel):
    date: datetime.date
    meals: list[MealModel]


class LocationSummaryModel(BaseModel):
    id: str
    name: str
    url: str


class LocationMenusModel(LocationSummaryModel):
    menus: list[DailyMenuModel]


class RefreshResultModel(BaseModel):
    refreshed: bool
    cached_at: datetime.datetime | None = None


def food_item_model(item: FoodItem) -> FoodItemModel:
    return FoodItemModel(
        name=item.name,
        allergens=allergen_names(item.allergens),
        price=format_price(item.price) if item.price is not None else None,
    )


def meal_section_model(section: MealSection) -> MealSectionModel:
    return MealSectionModel(
        name=section.name,
        food_items=[food_item_model(item) for item in section.food_items],
    )


def meal_model(meal: Meal) -> MealModel:
    return MealModel(
        meal_type=meal.meal_type.name,
        sections=[meal_section_model(section) for section in meal.sections],
    )


def daily_menu_model(menu: DailyMenu) -> DailyMenuModel:
    return DailyMenuModel(date=menu.date, meals=[meal_model(meal) for meal in menu.meals])


def location_summary_model(location: Location) -> LocationSummaryModel:
    return LocationSummaryModel(
        id=location.id, name=location.name, url=location.meta.url
    )


def location_menus_model(
    location: Location, menus: list[DailyMenu]
) -> LocationMenusModel:
    return LocationMenusModel(
        id=location.id,
        name=location.name,
        url=location.meta.url,
        menus=[daily_menu_model(menu) for menu in menus],
    )
