"""
Lookup state machine.

One ticker lookup at a time is *displayed*, even if several are in flight.
``LookupController`` hands every lookup a fresh request id and only lets the
outcome of the most recent one change ``state``: a slower, older response can
never overwrite a newer one.

States::

    Idle --lookup--> Loading --ok--> Loaded
                        |  \\--AcquisitionError--> Failed
                        |
    any --reset--> Idle   (in-flight lookups become stale)
    Loading --unexpected error--> Idle   (error re-raised to the caller)
"""

import itertools
import logging
from dataclasses import dataclass
from typing import Optional, Union

from fairvalue_service.connectors.base import AcquisitionError
from fairvalue_service.services.valuation import Analysis, ValuationService, normalize_ticker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Loading:
    request_id: int
    ticker: str


@dataclass(frozen=True)
class Loaded:
    request_id: int
    analysis: Analysis


@dataclass(frozen=True)
class Failed:
    request_id: int
    ticker: str
    error: AcquisitionError


LookupState = Union[Idle, Loading, Loaded, Failed]


class LookupController:
    def __init__(self, service: ValuationService):
        self.service = service
        self.state: LookupState = Idle()
        self._ids = itertools.count(1)
        self._current: Optional[int] = None
        self._last_ticker: Optional[str] = None

    @property
    def last_ticker(self) -> Optional[str]:
        return self._last_ticker

    def _is_current(self, request_id: int) -> bool:
        return request_id == self._current

    async def lookup(self, ticker: str) -> LookupState:
        """
        Run a lookup and return the state the controller is in afterwards.

        If a newer lookup (or a reset) happened while this one was awaiting
        the provider, its outcome is dropped and the returned state belongs
        to the newer request.
        """
        symbol = normalize_ticker(ticker)
        request_id = next(self._ids)
        self._current = request_id
        self._last_ticker = symbol
        self.state = Loading(request_id=request_id, ticker=symbol)

        try:
            analysis = await self.service.analyze(symbol)
            outcome: LookupState = Loaded(request_id=request_id, analysis=analysis)
        except AcquisitionError as e:
            logger.warning(f"Lookup {request_id} for {symbol} failed: {e}")
            outcome = Failed(request_id=request_id, ticker=symbol, error=e)
        except Exception:
            # Not a provider failure: never leave a stale Loading behind.
            if self._is_current(request_id):
                logger.error(f"Lookup {request_id} for {symbol} crashed; back to Idle")
                self._current = None
                self.state = Idle()
            else:
                logger.debug(f"Stale lookup {request_id} for {symbol} crashed")
            raise

        if self._is_current(request_id):
            self.state = outcome
        else:
            logger.debug(f"Discarding stale lookup {request_id} for {symbol}")
        return self.state

    async def retry(self) -> LookupState:
        if self._last_ticker is None:
            raise ValueError("Nothing to retry: no ticker has been looked up yet.")
        return await self.lookup(self._last_ticker)

    def reset(self) -> LookupState:
        """Back to the default view. Any in-flight lookup becomes stale."""
        self._current = None
        self.state = Idle()
        return self.state
