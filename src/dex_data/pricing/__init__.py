"""Derived-value computation callbacks for the loaders."""

from .reserve_price import ReservePriceCalculator

__all__ = ["ReservePriceCalculator"]
