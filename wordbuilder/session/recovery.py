"""
Recovery Handler - Startup resolution of the persisted session.

On start:
1. A persisted token exists → ask the service for its state
   - known: adopt it (details are fetched if the word qualifies)
   - unknown or any error: forget the token, create a new session
2. No token → create a new session

Runs once per handler; later calls return the outcome of the first run.
"""

from __future__ import annotations
import logging

from .controller import ErrorCode, OperationResult, SessionController

logger = logging.getLogger(__name__)

_NOT_ANSWERED = {ErrorCode.OPERATION_IN_PROGRESS, ErrorCode.STALE_RESPONSE}


class RecoveryHandler:
    """Restores or creates the session a controller works on."""

    def __init__(self, controller: SessionController):
        self.controller = controller
        self.initialized = False
        self.restored = False
        self._result: OperationResult | None = None

    async def run(self) -> OperationResult:
        if self.initialized and self._result is not None:
            return self._result
        self.initialized = True

        identity = self.controller.identity
        token = identity.load()
        if token:
            result = await self.controller.restore(token)
            if result.success:
                self.restored = True
                self._result = result
                return result
            if result.error_code in _NOT_ANSWERED:
                # The service never judged the token; try again on the next run.
                self.initialized = False
                return result
            logger.warning("Persisted session %s is unusable, starting a new one", token)
            identity.clear()

        self._result = await self.controller.initialize()
        return self._result
