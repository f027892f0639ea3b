"""
Remote Clients - Async HTTP access to the builder and dictionary services.

Both clients are thin: they encode requests, decode responses into the
pydantic schemas and translate failures into the exceptions of
``wordbuilder.api.errors``. No game logic lives here.

Usage:
    async with BuilderClient("http://localhost:8081/api/wordbuilder") as client:
        created = await client.init()
        result = await client.add_letter(created.session_id, "a", Position.PREFIX)
"""

from __future__ import annotations
from typing import Any
from urllib.parse import quote
import logging

import httpx
from pydantic import ValidationError

from .errors import DomainRejection, NotFound, TransportFailure
from .schemas import (
    AddLetterRequest,
    BuilderState,
    ErrorBody,
    ImageResponse,
    InitResponse,
    MutationResponse,
    Position,
    RemoveLetterRequest,
    ResetRequest,
    StateResponse,
    WordDetails,
)
from ..config import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)


class _ServiceClient:
    """Shared request plumbing for both services."""

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, transport=transport)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> dict[str, Any]:
        """
        Perform a request and return the decoded JSON object.

        Raises:
            NotFound: on HTTP 404
            DomainRejection: on other 4xx responses carrying an error message
            TransportFailure: on everything else that is not a 2xx JSON object
        """
        url = f"{self.base_url}{path}"
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise TransportFailure(f"{method} {url} failed: {exc}") from exc

        if response.status_code == 404:
            raise NotFound(
                _error_text(response) or "Session not found",
                status_code=response.status_code,
            )

        if 400 <= response.status_code < 500:
            message = _error_text(response)
            if message:
                raise DomainRejection(message, status_code=response.status_code)
            raise TransportFailure(
                f"{method} {url} returned {response.status_code}",
                status_code=response.status_code,
            )

        if not response.is_success:
            raise TransportFailure(
                f"{method} {url} returned {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise TransportFailure(f"{method} {url} returned invalid JSON") from exc
        if not isinstance(data, dict):
            raise TransportFailure(f"{method} {url} returned unexpected payload")
        return data


def _error_text(response: httpx.Response) -> str | None:
    """Extract ``{"error": "..."}`` from an error response, if present."""
    try:
        return ErrorBody.model_validate(response.json()).error
    except (ValueError, ValidationError):
        return None


def _decode(model, data: dict[str, Any]):
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise TransportFailure(f"Malformed {model.__name__}: {exc}") from exc


# =============================================================================
# Builder service
# =============================================================================

class BuilderClient(_ServiceClient):
    """Client for the remote word builder service."""

    async def init(self) -> InitResponse:
        """Create a new session."""
        data = await self._request("POST", "/init", json={})
        return _decode(InitResponse, data)

    async def get_state(self, session_id: str) -> BuilderState:
        """Fetch the current snapshot of an existing session."""
        data = await self._request("GET", "/state", params={"session_id": session_id})
        return _decode(StateResponse, data).state

    async def add_letter(
        self,
        session_id: str,
        letter: str,
        position: Position | str,
    ) -> MutationResponse:
        request = AddLetterRequest(
            session_id=session_id,
            letter=letter,
            position=Position(position),
        )
        data = await self._request("POST", "/add", json=request.model_dump(mode="json"))
        return _decode(MutationResponse, data)

    async def remove_letter(self, session_id: str, index: int) -> MutationResponse:
        request = RemoveLetterRequest(session_id=session_id, index=index)
        data = await self._request("POST", "/remove", json=request.model_dump(mode="json"))
        return _decode(MutationResponse, data)

    async def reset(self, session_id: str) -> MutationResponse:
        request = ResetRequest(session_id=session_id)
        data = await self._request("POST", "/reset", json=request.model_dump(mode="json"))
        return _decode(MutationResponse, data)


# =============================================================================
# Dictionary service
# =============================================================================

class DictionaryClient(_ServiceClient):
    """
    Client for the dictionary/image proxy.

    Unlike the builder client, a missing image is not an error: get_image
    returns None when the service has nothing for the word.
    """

    async def get_details(self, word: str) -> WordDetails:
        data = await self._request("GET", f"/details/{quote(word, safe='')}")
        return _decode(WordDetails, data)

    async def get_image(self, word: str) -> str | None:
        try:
            data = await self._request("GET", f"/image/{quote(word, safe='')}")
        except NotFound:
            logger.debug("No image for %r", word)
            return None
        return _decode(ImageResponse, data).image_url

    async def get_complete_details(self, word: str) -> WordDetails:
        """Details and image in a single request."""
        data = await self._request("GET", f"/complete/{quote(word, safe='')}")
        return _decode(WordDetails, data)
