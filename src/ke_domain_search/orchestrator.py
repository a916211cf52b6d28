"""
Search orchestrator for the domain search pipeline.

Drives the suggestion generator from user input:
- debounces keystrokes so only the last one in a quiet window searches
- tracks the visible state (idle, debouncing, searching, resolved, errored)
- shows skeleton suggestions while a search is resolving
- discards completions whose query no longer matches the input, and
  completions of any run other than the most recently started one

In-flight lookups are never cancelled; results that arrive for an
abandoned query still populate the cache for later searches.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from .config import SearchConfig
from .enums import SearchState
from .i18n import get_message
from .models import Suggestion
from .search_logger import SearchLogger, quiet_logger
from .suggestions import SuggestionGenerator


@dataclass
class SearchSnapshot:
    """What the UI should render right now."""

    state: SearchState
    query: str
    suggestions: list[Suggestion] = field(default_factory=list)
    error_message: Optional[str] = None


SnapshotListener = Callable[[SearchSnapshot], None]


class SearchOrchestrator:
    """
    Debounced search state machine.

    Usage (inside a running event loop):
        orchestrator.update_query("mybr")   # on every keystroke
        await orchestrator.search_now()     # on Enter / button press
    """

    COMPONENT = "orchestrator"

    def __init__(
        self,
        generator: SuggestionGenerator,
        config: Optional[SearchConfig] = None,
        logger: Optional[SearchLogger] = None,
        language: str = "en",
        results_ttl_seconds: float = 120.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Args:
            generator: Suggestion generator to run searches with
            config: Debounce delay and minimum query length
            logger: Logger for state transitions
            language: Language of user-facing messages
            results_ttl_seconds: How long resolved results count as fresh
            clock: Source of the current time in seconds
        """
        self._generator = generator
        self._config = config or SearchConfig()
        self._logger = logger or quiet_logger()
        self._language = language
        self._results_ttl = results_ttl_seconds
        self._clock = clock

        self._state = SearchState.IDLE
        self._query = ""
        self._suggestions: list[Suggestion] = []
        self._error_message: Optional[str] = None
        self._resolved_label: Optional[str] = None
        self._resolved_at = 0.0
        self._search_count = 0
        self._run_seq = 0

        self._timer: Optional[asyncio.TimerHandle] = None
        self._tasks: set[asyncio.Task] = set()
        self._listeners: list[SnapshotListener] = []

    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def query(self) -> str:
        return self._query

    @property
    def suggestions(self) -> list[Suggestion]:
        return list(self._suggestions)

    @property
    def error_message(self) -> Optional[str]:
        return self._error_message

    @property
    def search_count(self) -> int:
        """Number of searches started."""
        return self._search_count

    def snapshot(self) -> SearchSnapshot:
        return SearchSnapshot(
            state=self._state,
            query=self._query,
            suggestions=list(self._suggestions),
            error_message=self._error_message,
        )

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

    def _set_state(self, state: SearchState) -> None:
        if state is not self._state:
            self._logger.debug(self.COMPONENT, f"{self._state.value} -> {state.value}", {
                "query": self._query,
            })
        self._state = state

    def _label(self, query: str) -> str:
        return self._generator.normalize(query)

    def _is_searchable(self, label: str) -> bool:
        return len(label) >= self._config.min_query_length

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _go_idle(self) -> None:
        self._cancel_timer()
        self._run_seq += 1
        self._set_state(SearchState.IDLE)
        self._suggestions = []
        self._error_message = None
        self._resolved_label = None
        self._notify()

    def _keep_resolved(self, label: str) -> None:
        self._cancel_timer()
        self._logger.debug(self.COMPONENT, "Results still fresh, skipping search", {"label": label})
        if self._state is not SearchState.RESOLVED:
            self._set_state(SearchState.RESOLVED)
            self._notify()

    def update_query(self, query: str) -> None:
        """
        Handle a keystroke.

        Must be called from within a running event loop. Restarts the
        debounce timer, or returns to idle when the query is too short.
        Input that normalizes to the label of fresh results keeps them.
        """
        self._query = query
        self._cancel_timer()

        label = self._label(query)
        if not self._is_searchable(label):
            self._go_idle()
            return
        if self._is_fresh(label):
            self._keep_resolved(label)
            return

        self._set_state(SearchState.DEBOUNCING)
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self._config.debounce_seconds, self._fire, query)
        self._notify()

    def _fire(self, query: str) -> None:
        self._timer = None
        label = self._label(query)
        if label != self._label(self._query):
            return
        if self._is_fresh(label):
            self._keep_resolved(label)
            return
        task = asyncio.ensure_future(self._run_search(query))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _is_fresh(self, label: str) -> bool:
        return (
            self._resolved_label == label
            and self._clock() - self._resolved_at <= self._results_ttl
        )

    async def search_now(self, query: Optional[str] = None) -> bool:
        """
        Search immediately, skipping the debounce delay.

        Args:
            query: New query text; the current query when None

        Returns:
            True if a search ran, False if it was a no-op (query too
            short, or the same query is already resolved and fresh)
        """
        if query is not None:
            self._query = query
        self._cancel_timer()

        label = self._label(self._query)
        if not self._is_searchable(label):
            self._go_idle()
            return False
        if self._is_fresh(label):
            self._keep_resolved(label)
            return False

        await self._run_search(self._query)
        return True

    async def _run_search(self, query: str) -> None:
        self._run_seq += 1
        run_id = self._run_seq
        label = self._label(query)
        self._search_count += 1
        self._resolved_label = None
        self._set_state(SearchState.SEARCHING)
        self._error_message = None
        self._notify()

        def publish_skeleton(skeleton: list[Suggestion]) -> None:
            if self._is_current(run_id, label):
                self._suggestions = skeleton
                self._notify()

        try:
            results = await self._generator.generate(query, publish=publish_skeleton)
        except Exception as e:
            if not self._is_current(run_id, label):
                self._discard(label)
                return
            self._logger.log_error(self.COMPONENT, f"Search failed for '{label}'", error=e)
            self._suggestions = []
            self._error_message = get_message("search.failed", self._language)
            self._set_state(SearchState.ERRORED)
            self._notify()
            return

        if not self._is_current(run_id, label):
            self._discard(label)
            return

        self._suggestions = results
        if results:
            self._resolved_label = label
            self._resolved_at = self._clock()
            self._set_state(SearchState.RESOLVED)
        else:
            self._error_message = get_message("search.no_suggestions", self._language, query=label)
            self._set_state(SearchState.ERRORED)
        self._notify()

    def _is_current(self, run_id: int, label: str) -> bool:
        # Only the most recently started run may update what is shown.
        return run_id == self._run_seq and label == self._label(self._query)

    def _discard(self, label: str) -> None:
        self._logger.debug(self.COMPONENT, f"Discarding stale results for '{label}'", {
            "current_query": self._query,
        })

    async def wait_until_settled(self) -> None:
        """Wait until no debounce timer is pending and no search is running."""
        while self._timer is not None or self._tasks:
            if self._tasks:
                await asyncio.gather(*list(self._tasks), return_exceptions=True)
            else:
                await asyncio.sleep(self._config.debounce_seconds / 2)

    def reset(self) -> None:
        """Clear the query and return to idle."""
        self._query = ""
        self._go_idle()
