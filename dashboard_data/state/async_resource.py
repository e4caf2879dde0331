"""
Generic async resource container.

Tracks {data, loading, error} for one backend resource, fetches on
activation and whenever its dependency key changes, and exposes refetch()
for retry affordances. Containers never raise to their caller: failures are
captured as a message in the error field.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, List, Optional, Tuple

from config import settings
from ..api.api_errors import BackendError
from .state_models import FetchState

logger = logging.getLogger(__name__)

StateListener = Callable[[FetchState], None]


def _no_data() -> Any:
    return None


class AsyncResource:
    """
    Stateful binding between one accessor and its consumers.

    Each fetch is tagged with a sequence number at issue time. With
    discard_stale_responses enabled, only the latest request may settle the
    state; otherwise responses are applied in arrival order.
    """

    def __init__(self, name: str, fetcher: Optional[Callable[..., Awaitable[Any]]] = None,
                 dependencies: Tuple = (), empty_data: Callable[[], Any] = _no_data,
                 reset_data_on_error: bool = False, default_error: Optional[str] = None,
                 discard_stale_responses: Optional[bool] = None):
        """
        Args:
            name: Resource name used in logs
            fetcher: Accessor called as fetcher(*dependencies); subclasses may override fetch() instead
            dependencies: Initial dependency key
            empty_data: Factory for the empty value (initial state and reset)
            reset_data_on_error: Reset data to empty on failure instead of keeping it
            default_error: Message used when a failure has no text of its own
            discard_stale_responses: Drop responses superseded by a newer request
        """
        self.name = name
        self._fetcher = fetcher
        self._dependencies = tuple(dependencies)
        self._empty_data = empty_data
        self.reset_data_on_error = reset_data_on_error
        self.default_error = default_error or f"Failed to fetch {name}"
        if discard_stale_responses is None:
            discard_stale_responses = settings.DISCARD_STALE_RESPONSES
        self.discard_stale_responses = discard_stale_responses

        self._state = FetchState(data=empty_data(), loading=True, error=None)
        self._listeners: List[StateListener] = []
        self._sequence = 0
        self._in_flight = 0
        self._active = False
        self._closed = False

    @property
    def state(self) -> FetchState:
        return self._state

    @property
    def data(self) -> Any:
        return self._state.data

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def error(self) -> Optional[str]:
        return self._state.error

    @property
    def dependencies(self) -> Tuple:
        return self._dependencies

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: StateListener) -> None:
        """Register a callback invoked with every new state."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _set_state(self, state: FetchState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception(f"[{self.name}] State listener failed")

    async def fetch(self, *dependencies) -> Any:
        """Call the accessor for one dependency key."""
        return await self._fetcher(*dependencies)

    def can_fetch(self, dependencies: Tuple) -> bool:
        """Whether the dependency key allows a request. Subclasses gate on e.g. an empty symbol."""
        return True

    async def activate(self) -> FetchState:
        """First fetch. Calling it again is a no-op."""
        if self._active or self._closed:
            return self._state
        self._active = True
        return await self._run_fetch()

    async def set_dependencies(self, *dependencies) -> FetchState:
        """Change the dependency key; fetches only when it actually changed."""
        dependencies = tuple(dependencies)
        if dependencies == self._dependencies:
            return self._state

        logger.info(f"[{self.name}] Dependencies changed {self._dependencies} -> {dependencies}")
        self._dependencies = dependencies
        if not self._active:
            return self._state
        return await self._run_fetch()

    async def refetch(self) -> FetchState:
        """Re-run the fetch for the current dependency key."""
        return await self._run_fetch()

    async def _run_fetch(self) -> FetchState:
        if self._closed:
            return self._state

        self._sequence += 1
        ticket = self._sequence
        dependencies = self._dependencies

        if not self.can_fetch(dependencies):
            logger.info(f"[{self.name}] Skipping fetch for {dependencies}")
            self._set_state(FetchState(data=self._state.data, loading=False,
                                       error=None, updated_at=self._state.updated_at))
            return self._state

        self._set_state(FetchState(data=self._state.data, loading=True,
                                   error=None, updated_at=self._state.updated_at))
        self._in_flight += 1
        try:
            data = await self.fetch(*dependencies)
        except BackendError as e:
            self._settle_error(ticket, dependencies, str(e))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception(f"[{self.name}] Unexpected error while fetching")
            self._settle_error(ticket, dependencies, str(e))
        else:
            self._settle_success(ticket, dependencies, data)
        finally:
            self._in_flight -= 1

        return self._state

    def _accepts(self, ticket: int, dependencies: Tuple) -> bool:
        if self._closed:
            logger.info(f"[{self.name}] Ignoring response after close")
            return False
        if self.discard_stale_responses and ticket != self._sequence:
            logger.info(f"[{self.name}] Discarding stale response for {dependencies}")
            return False
        return True

    def _settle_success(self, ticket: int, dependencies: Tuple, data: Any) -> None:
        if not self._accepts(ticket, dependencies):
            return
        self._set_state(FetchState(data=data, loading=False, error=None,
                                   updated_at=datetime.now(timezone.utc)))
        logger.info(f"[{self.name}] Fetched {dependencies}")

    def _settle_error(self, ticket: int, dependencies: Tuple, message: str) -> None:
        if not self._accepts(ticket, dependencies):
            return
        data = self._empty_data() if self.reset_data_on_error else self._state.data
        self._set_state(FetchState(data=data, loading=False, error=message or self.default_error,
                                   updated_at=self._state.updated_at))
        logger.error(f"[{self.name}] Fetch failed for {dependencies}: {self._state.error}")

    async def close(self) -> None:
        """Tear down; responses settling afterwards are ignored."""
        self._closed = True

    async def __aenter__(self):
        await self.activate()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
