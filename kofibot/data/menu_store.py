"""Menu helpers: load menu.csv and select the menu for the current meal period.

Menu items are immutable reference data grouped by meal period. Which period
is "current" is a pure function of the time of day.
"""
from datetime import datetime, time
from decimal import Decimal
from typing import Dict, List, Optional
import csv
import os

from ..schemas.commerce_models import MealPeriod, MenuItem

MENU_PATH = os.path.join(os.path.dirname(__file__), "raw", "menu.csv")

BREAKFAST_START = time(5, 0)
LUNCH_START = time(11, 0)
DINNER_START = time(16, 0)

PREVIEW_SIZE = 3


def period_for(moment: time) -> MealPeriod:
    """breakfast [05:00, 11:00), lunch [11:00, 16:00), dinner otherwise."""
    if BREAKFAST_START <= moment < LUNCH_START:
        return MealPeriod.breakfast
    if LUNCH_START <= moment < DINNER_START:
        return MealPeriod.lunch
    return MealPeriod.dinner


class MenuStore:
    def __init__(self, menu_path: Optional[str] = None):
        self.menu_path = menu_path or MENU_PATH
        self.menus: Dict[MealPeriod, List[MenuItem]] = {p: [] for p in MealPeriod}
        self._load()

    def _load(self):
        with open(self.menu_path, newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            for row in reader:
                allergens = row.get("allergens", "") or ""
                item = MenuItem(
                    id=int(row["id"]),
                    name=row["name"].strip(),
                    # normalize price to Decimal (strip $ and commas)
                    price=Decimal(row["price"].replace("$", "").replace(",", "").strip()),
                    available=row.get("available", "true").strip().lower() in ("1", "true", "yes"),
                    allergens=frozenset(a.strip().lower() for a in allergens.split(";") if a.strip()),
                )
                self.menus[MealPeriod(row["period"].strip().lower())].append(item)

    def items_for(self, period: MealPeriod) -> List[MenuItem]:
        return list(self.menus[period])

    def current_period(self, now: Optional[datetime] = None) -> MealPeriod:
        return period_for((now or datetime.now()).time())

    def find_item(self, item_id: int, period: MealPeriod) -> Optional[MenuItem]:
        for item in self.menus[period]:
            if item.id == item_id:
                return item
        return None

    def preview(self, now: Optional[datetime] = None, limit: int = PREVIEW_SIZE) -> str:
        """Heading line plus up to ``limit`` available items of the current period."""
        period = self.current_period(now)
        items = [i for i in self.items_for(period) if i.available][:limit]
        if not items:
            return f"Our {period.value} menu is not available right now."
        lines = [f"Here is our {period.value} menu:"]
        for item in items:
            lines.append(f"{item.id}. {item.name} - ${item.price}")
        return "\n".join(lines)


# Provide a module-level singleton for convenience
_store: Optional[MenuStore] = None


def get_menu_store() -> MenuStore:
    global _store
    if _store is None:
        _store = MenuStore()
    return _store
