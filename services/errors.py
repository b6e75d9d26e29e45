"""Custom exception classes for structured error handling."""

from __future__ import annotations


class AppError(Exception):
    """Base application error with an associated CLI exit code."""

    exit_code: int = 1

    def __init__(self, message: str = "Profit engine error") -> None:
        super().__init__(message)


class ValidationError(AppError):
    exit_code = 2


class ComputationError(AppError):
    """A collaborator failed while a report was being computed.

    ``source`` names the failing collaborator (orders, costs, ad_spend,
    fixed_costs). No report is persisted when this is raised.
    """

    exit_code = 3

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"Calculation failed ({source}): {message}")
        self.source = source


class ShopifyFetchError(AppError):
    exit_code = 4


class NotFoundError(AppError):
    exit_code = 5
