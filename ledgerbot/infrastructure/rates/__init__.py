"""Exchange-rate providers."""

from .frankfurter import FrankfurterRateProvider, UnavailableRateProvider

__all__ = ["FrankfurterRateProvider", "UnavailableRateProvider"]
