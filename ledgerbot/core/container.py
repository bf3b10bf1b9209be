"""Simple dependency container for wiring core services."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from ledgerbot.core.config import Settings, get_settings
from ledgerbot.infrastructure.database.session import build_engine, build_session_factory
from ledgerbot.infrastructure.rates import FrankfurterRateProvider, UnavailableRateProvider
from ledgerbot.modules.currency.models import RateProvider
from ledgerbot.modules.currency.service import CurrencyConverter
from ledgerbot.modules.flows import ArtifactCleaner, FlowDependencies, FlowDispatcher
from ledgerbot.modules.ledger.service import LedgerService
from ledgerbot.modules.sessions.store import SessionStore


@dataclass(slots=True)
class ApplicationContainer:
    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    ledger: LedgerService
    sessions: SessionStore
    converter: CurrencyConverter

    def flow_dispatcher(self, cleaner: ArtifactCleaner) -> FlowDispatcher:
        """Dispatcher bound to a per-request artifact cleaner."""
        deps = FlowDependencies(
            session_factory=self.session_factory,
            ledger=self.ledger,
            converter=self.converter,
            cleaner=cleaner,
            settings=self.settings.ledger,
        )
        return FlowDispatcher(self.sessions, deps)

    async def dispose(self) -> None:
        await self.engine.dispose()


def build_rate_provider(settings: Settings) -> RateProvider:
    if not settings.rates.enabled:
        return UnavailableRateProvider()
    return FrankfurterRateProvider(settings.rates.base_url, timeout=settings.rates.timeout)


def build_container(settings: Settings, *, rate_provider: RateProvider | None = None) -> ApplicationContainer:
    engine = build_engine(settings.database, debug=settings.debug)
    session_factory = build_session_factory(engine)
    return ApplicationContainer(
        settings=settings,
        engine=engine,
        session_factory=session_factory,
        ledger=LedgerService(session_factory),
        sessions=SessionStore(session_factory),
        converter=CurrencyConverter(rate_provider or build_rate_provider(settings)),
    )


@lru_cache()
def get_container() -> ApplicationContainer:
    return build_container(get_settings())


__all__ = ["ApplicationContainer", "build_container", "build_rate_provider", "get_container"]
