"""Collaborator interfaces the profit engine depends on."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from decimal import Decimal

from services.schemas import AdSpendEntry, FixedCostEntry, Order, ProfitReport


class OrderSource(ABC):
    @abstractmethod
    def fetch_orders_for_date(self, shop: str, date: str) -> list[Order]: ...


class CostSource(ABC):
    @abstractmethod
    def get_cost_lookup(self, shop: str, variant_ids: Iterable[str]) -> dict[str, Decimal]: ...


class AdSpendSource(ABC):
    @abstractmethod
    def get_ad_spend(self, shop: str, date: str) -> list[AdSpendEntry]: ...


class FixedCostSource(ABC):
    @abstractmethod
    def get_active_fixed_costs(self, shop: str) -> list[FixedCostEntry]: ...


class ReportStore(ABC):
    """Daily reports keyed by (shop, date), scanned as an ordered range."""

    @abstractmethod
    def put_profit_report(self, shop: str, date: str, report: ProfitReport) -> None: ...

    @abstractmethod
    def get_profit_report(self, shop: str, date: str) -> ProfitReport | None: ...

    @abstractmethod
    def scan(self, shop: str, date_low: str, date_high: str) -> list[ProfitReport]: ...
