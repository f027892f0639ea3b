"""
Session Controller - Client-side state machine for a word builder session.

The controller:
1. Issues init/add/remove/reset against the remote builder service
2. Replaces its snapshot wholesale with every successful response
3. Derives the loading phase (see phase.py)
4. Triggers the word details lookup when the answer becomes a real word

RULES:
- The client NEVER computes validity, letter sets or completions
- One mutating call at a time; a second call while one is outstanding
  is rejected, not queued
- A response is only applied if the session generation it was issued
  under is still current
- User-visible errors are a single transient string, replaced or cleared
  by the next operation
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable
import asyncio
import logging

from ..api.client import BuilderClient, DictionaryClient
from ..api.errors import BuilderServiceError, DomainRejection, NotFound
from ..api.schemas import BuilderState, MutationResponse, Position, WordDetails
from ..config import ClientConfig
from .details import WordDetailsFetcher
from .identity import FileIdentityStore, SessionIdentityStore
from .phase import PhaseEvent, SessionPhase, advance

logger = logging.getLogger(__name__)

INIT_FAILED_MESSAGE = "Failed to initialize WordBuilder."
ADD_FAILED_MESSAGE = "Failed to add letter."
REMOVE_FAILED_MESSAGE = "Failed to remove letter."
RESET_FAILED_MESSAGE = "Failed to reset word builder."
BUSY_MESSAGE = "Another operation is still in progress."
NO_SESSION_MESSAGE = "No active session."
STALE_MESSAGE = "Response discarded: session changed while it was in flight."


class ErrorCode(Enum):
    """Why an operation did not apply."""
    TRANSPORT_FAILURE = "transport_failure"
    DOMAIN_REJECTION = "domain_rejection"
    SESSION_NOT_FOUND = "session_not_found"
    OPERATION_IN_PROGRESS = "operation_in_progress"
    NO_SESSION = "no_session"
    STALE_RESPONSE = "stale_response"


@dataclass
class OperationResult:
    """
    Outcome of a controller operation.

    Contains:
    - Whether a new snapshot was applied
    - The snapshot held afterwards
    - The user-visible error, if any
    - The service's message (e.g. "Word builder has been reset.")
    """
    success: bool
    state: BuilderState | None = None
    error: str | None = None
    error_code: ErrorCode | None = None
    message: str | None = None

    @classmethod
    def ok(cls, state: BuilderState, message: str | None = None) -> OperationResult:
        return cls(success=True, state=state, message=message)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: ErrorCode,
        state: BuilderState | None = None,
    ) -> OperationResult:
        return cls(success=False, state=state, error=error, error_code=error_code)


class SessionController:
    """
    Drives one builder session.

    Usage:
        controller = SessionController(builder, MemoryIdentityStore(), fetcher)

        await controller.initialize()
        await controller.add_letter("a", Position.PREFIX)
        await controller.add_letter("t", Position.SUFFIX)

        await controller.wait_for_details()
        print(controller.state.answer, controller.details)
    """

    def __init__(
        self,
        builder: BuilderClient,
        identity: SessionIdentityStore,
        details_fetcher: WordDetailsFetcher | None = None,
    ):
        self.builder = builder
        self.identity = identity
        self.details_fetcher = details_fetcher

        self.error: str | None = None
        self.details: WordDetails | None = None

        self._phase = SessionPhase.uninitialized()
        self._token: str | None = None
        self._generation = 0

        # (generation, request id, word) of the lookup whose result may apply
        self._details_key: tuple[int, int, str] | None = None
        self._details_requests = 0
        self._details_tasks: set[asyncio.Task] = set()

        self._owns_clients = False

    @classmethod
    def from_config(cls, config: ClientConfig, transport=None) -> SessionController:
        """Build a controller with its own HTTP clients and a file token store."""
        builder = BuilderClient(config.api_url, timeout=config.timeout, transport=transport)
        dictionary = DictionaryClient(
            config.dictionary_url, timeout=config.timeout, transport=transport
        )
        controller = cls(
            builder=builder,
            identity=FileIdentityStore(config.session_file, key=config.session_key),
            details_fetcher=WordDetailsFetcher(dictionary),
        )
        controller._owns_clients = True
        return controller

    # =========================================================================
    # Observers
    # =========================================================================

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def state(self) -> BuilderState | None:
        return self._phase.state

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def loading(self) -> bool:
        return self._phase.is_loading

    @property
    def has_session(self) -> bool:
        return self._token is not None and self.state is not None

    @property
    def valid_completions(self) -> list[str]:
        if self.state is None:
            return []
        return list(self.state.valid_completions or [])

    # =========================================================================
    # Operations
    # =========================================================================

    async def initialize(self) -> OperationResult:
        """Create a new remote session and adopt it."""
        if self.loading:
            return OperationResult.failure(BUSY_MESSAGE, ErrorCode.OPERATION_IN_PROGRESS)

        self._phase = advance(self._phase, PhaseEvent.BEGIN_INIT)
        self._token = None
        self._clear_details()
        generation = self._next_generation()

        try:
            created = await self.builder.init()
        except BuilderServiceError as e:
            if self._is_stale(generation):
                return self._discard("init")
            message = e.message if isinstance(e, DomainRejection) else INIT_FAILED_MESSAGE
            logger.warning("Session initialization failed: %s", e)
            self._phase = advance(self._phase, PhaseEvent.INIT_FAILED, reason=message)
            self.error = message
            return OperationResult.failure(message, _error_code(e))
        except BaseException:
            if not self._is_stale(generation):
                self._phase = advance(
                    self._phase, PhaseEvent.INIT_FAILED, reason=INIT_FAILED_MESSAGE
                )
            raise

        if self._is_stale(generation):
            return self._discard("init")

        self._adopt(created.session_id, created.state)
        logger.info("Session %s created", created.session_id)
        return OperationResult.ok(created.state)

    async def restore(self, token: str) -> OperationResult:
        """
        Adopt a previously persisted token if the service still knows it.

        On failure the controller is left UNINITIALIZED; deciding what to do
        next (and clearing the persisted token) is up to the caller.
        """
        if self.loading:
            return OperationResult.failure(BUSY_MESSAGE, ErrorCode.OPERATION_IN_PROGRESS)

        self._phase = advance(self._phase, PhaseEvent.BEGIN_INIT)
        self._token = None
        self._clear_details()
        generation = self._next_generation()

        try:
            state = await self.builder.get_state(token)
        except BuilderServiceError as e:
            if self._is_stale(generation):
                return self._discard("restore")
            logger.info("Could not restore session %s: %s", token, e)
            self._phase = advance(self._phase, PhaseEvent.SESSION_LOST)
            return OperationResult.failure(e.message, _error_code(e))
        except BaseException:
            if not self._is_stale(generation):
                self._phase = advance(self._phase, PhaseEvent.SESSION_LOST)
            raise

        if self._is_stale(generation):
            return self._discard("restore")

        self._adopt(token, state)
        logger.info("Session %s restored at step %d", token, state.step)
        return OperationResult.ok(state)

    async def add_letter(self, letter: str, position: Position | str) -> OperationResult:
        """
        Attach a letter to the front or back of the answer.

        Raises:
            ValueError: if position is not "prefix" or "suffix"
        """
        position = Position(position)
        return await self._mutate(
            "add",
            ADD_FAILED_MESSAGE,
            lambda token: self.builder.add_letter(token, letter, position),
        )

    async def remove_letter(self, index: int) -> OperationResult:
        """
        Remove the letter at index.

        If the service no longer knows the session, the token and state are
        dropped and nothing else happens: call initialize() to start over.
        """
        return await self._mutate(
            "remove",
            REMOVE_FAILED_MESSAGE,
            lambda token: self.builder.remove_letter(token, index),
        )

    async def reset(self) -> OperationResult:
        """
        Start the current session over.

        Without a session this is initialize(). If the service no longer
        knows the session, a new one is created straight away.
        """
        if not self.loading and not self.has_session:
            return await self.initialize()

        result = await self._mutate(
            "reset",
            RESET_FAILED_MESSAGE,
            lambda token: self.builder.reset(token),
        )
        if result.error_code == ErrorCode.SESSION_NOT_FOUND:
            logger.info("Session lost during reset, creating a new one")
            return await self.initialize()
        return result

    async def wait_for_details(self) -> WordDetails | None:
        """Wait for outstanding detail lookups and return the held details."""
        while True:
            pending = [task for task in self._details_tasks if not task.done()]
            if not pending:
                return self.details
            await asyncio.gather(*pending, return_exceptions=True)

    async def close(self) -> None:
        """
        Stop using the session.

        Outstanding responses are discarded. The persisted token is kept so
        the session can be restored later.
        """
        self._next_generation()
        self._clear_details()
        for task in list(self._details_tasks):
            task.cancel()
        self._details_tasks.clear()
        self._phase = SessionPhase.uninitialized()
        self._token = None
        if self._owns_clients:
            await self.builder.aclose()
            if self.details_fetcher:
                await self.details_fetcher.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _mutate(
        self,
        operation: str,
        fallback_message: str,
        call: Callable[[str], Awaitable[MutationResponse]],
    ) -> OperationResult:
        """Run one mutating call and fold its outcome into the controller."""
        if self.loading:
            return OperationResult.failure(
                BUSY_MESSAGE, ErrorCode.OPERATION_IN_PROGRESS, state=self.state
            )
        if not self.has_session:
            return OperationResult.failure(NO_SESSION_MESSAGE, ErrorCode.NO_SESSION)

        token = self._token
        generation = self._generation
        self._phase = advance(self._phase, PhaseEvent.BEGIN_MUTATION)

        try:
            response = await call(token)
        except NotFound as e:
            if self._is_stale(generation):
                return self._discard(operation)
            self._lose_session(e.message)
            return OperationResult.failure(e.message, ErrorCode.SESSION_NOT_FOUND)
        except DomainRejection as e:
            if self._is_stale(generation):
                return self._discard(operation)
            return self._settle_with_error(e.message, ErrorCode.DOMAIN_REJECTION)
        except BuilderServiceError as e:
            if self._is_stale(generation):
                return self._discard(operation)
            logger.warning("%s failed for session %s: %s", operation, token, e)
            return self._settle_with_error(fallback_message, ErrorCode.TRANSPORT_FAILURE)
        except BaseException:
            # Cancelled or broken call: never leave the controller busy
            if not self._is_stale(generation):
                self._phase = advance(self._phase, PhaseEvent.SETTLED)
            raise

        if self._is_stale(generation):
            return self._discard(operation)

        if not response.success or response.state is None:
            return self._settle_with_error(
                response.message or fallback_message, ErrorCode.DOMAIN_REJECTION
            )

        self._apply(PhaseEvent.SETTLED, response.state)
        self.error = None
        logger.debug("%s applied, step %d", operation, response.state.step)
        return OperationResult.ok(response.state, response.message)

    def _adopt(self, token: str, state: BuilderState) -> None:
        self._token = token
        self._apply(PhaseEvent.INIT_OK, state)
        self.error = None
        self.identity.save(token)

    def _apply(self, event: PhaseEvent, state: BuilderState) -> None:
        self._phase = advance(self._phase, event, state=state)
        self._sync_details(state)

    def _settle_with_error(self, message: str, code: ErrorCode) -> OperationResult:
        self._phase = advance(self._phase, PhaseEvent.SETTLED)
        self.error = message
        return OperationResult.failure(message, code, state=self.state)

    def _lose_session(self, message: str) -> None:
        logger.info("Session %s is no longer known to the service", self._token)
        self.identity.clear()
        self._token = None
        self._next_generation()
        self._clear_details()
        self._phase = advance(self._phase, PhaseEvent.SESSION_LOST)
        self.error = message

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _is_stale(self, generation: int) -> bool:
        return generation != self._generation

    def _discard(self, operation: str) -> OperationResult:
        logger.debug("Discarding stale %s response", operation)
        return OperationResult.failure(STALE_MESSAGE, ErrorCode.STALE_RESPONSE, state=self.state)

    # =========================================================================
    # Word details
    # =========================================================================

    def _sync_details(self, state: BuilderState) -> None:
        """Fetch details for a new real word, drop them otherwise."""
        if self.details_fetcher is None or not self.details_fetcher.should_fetch(state):
            self._clear_details()
            return

        key = self._details_key
        if key is not None and key[0] == self._generation and key[2] == state.answer:
            return

        self._clear_details()
        self._details_requests += 1
        self._details_key = (self._generation, self._details_requests, state.answer)
        task = asyncio.create_task(self._load_details(self._details_key))
        self._details_tasks.add(task)
        task.add_done_callback(self._details_tasks.discard)

    async def _load_details(self, key: tuple[int, int, str]) -> None:
        details = await self.details_fetcher.fetch(key[2])
        if key != self._details_key:
            logger.debug("Discarding details for %r", key[2])
            return
        self.details = details

    def _clear_details(self) -> None:
        self.details = None
        self._details_key = None


def _error_code(error: BuilderServiceError) -> ErrorCode:
    if isinstance(error, NotFound):
        return ErrorCode.SESSION_NOT_FOUND
    if isinstance(error, DomainRejection):
        return ErrorCode.DOMAIN_REJECTION
    return ErrorCode.TRANSPORT_FAILURE
