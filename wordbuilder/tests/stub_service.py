"""
Stub builder and dictionary services for tests.

A FastAPI app speaking the same HTTP contract as the real backend, with a
tiny word list. Tests can:
- queue exact replies per route (status + body)
- expire sessions so the next call gets a 404
- hold a route open to keep a request in flight
- make dictionary lookups fail
"""

from __future__ import annotations
from collections import defaultdict
from itertools import count
from typing import Any
import asyncio

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from ..api.schemas import AddLetterRequest, Position, RemoveLetterRequest, ResetRequest

BUILDER_PREFIX = "/api/wordbuilder"
DICTIONARY_PREFIX = "/api/dictionary"

WORDS = frozenset({"at", "an", "bat", "cat", "tab", "ant"})

Scripted = tuple[JSONResponse, dict[str, Any]]


def snapshot(answer: str, step: int, words=WORDS) -> dict[str, Any]:
    """Builder state for an answer, computed from the stub word list."""
    prefix = set()
    suffix = set()
    for word in words:
        for start in range(len(word) - len(answer) + 1):
            if word[start:start + len(answer)] != answer:
                continue
            if start > 0:
                prefix.add(word[start - 1])
            end = start + len(answer)
            if end < len(word):
                suffix.add(word[end])

    state: dict[str, Any] = {
        "answer": answer,
        "prefix_set": sorted(prefix),
        "suffix_set": sorted(suffix),
        "step": step,
        "is_valid_word": answer in words,
    }
    if answer and answer not in words:
        state["valid_completions"] = sorted(w for w in words if answer in w)
    return state


class StubService:
    """In-memory stand-in for the remote services."""

    def __init__(self, words=WORDS):
        self.words = words
        self.sessions: dict[str, dict[str, Any]] = {}
        self.replies: dict[str, list[tuple[int, dict[str, Any]]]] = defaultdict(list)
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[tuple[str, Any]] = []
        self.failing_words: set[str] = set()
        self._ids = count(1)
        self.app = self._build_app()

    # =========================================================================
    # Test controls
    # =========================================================================

    def queue(self, route: str, body: dict[str, Any], status: int = 200):
        """Answer the next call to route with this body."""
        self.replies[route].append((status, body))

    def expire(self, session_id: str):
        self.sessions.pop(session_id, None)

    def hold(self, route: str) -> asyncio.Event:
        """Block the next call to route until the returned event is set."""
        gate = asyncio.Event()
        self.gates[route] = gate
        return gate

    def calls_to(self, route: str) -> list[Any]:
        return [payload for name, payload in self.calls if name == route]

    # =========================================================================
    # App
    # =========================================================================

    async def _enter(self, route: str, payload: Any = None) -> Scripted | None:
        self.calls.append((route, payload))
        gate = self.gates.pop(route, None)
        if gate is not None:
            await gate.wait()
        if self.replies[route]:
            status, body = self.replies[route].pop(0)
            return JSONResponse(status_code=status, content=body), body
        return None

    def _store(self, session_id: str, scripted: Scripted):
        response, body = scripted
        if response.status_code == 200 and body.get("state"):
            self.sessions[session_id] = body["state"]

    def _build_app(self) -> FastAPI:
        app = FastAPI(title="Stub Word Builder")

        @app.post(f"{BUILDER_PREFIX}/init")
        async def init():
            scripted = await self._enter("init")
            if scripted is not None:
                if "session_id" in scripted[1]:
                    self._store(scripted[1]["session_id"], scripted)
                return scripted[0]
            session_id = f"s{next(self._ids)}"
            self.sessions[session_id] = snapshot("", 0, self.words)
            return {"session_id": session_id, "state": self.sessions[session_id], "success": True}

        @app.get(f"{BUILDER_PREFIX}/state")
        async def get_state(session_id: str):
            scripted = await self._enter("state", session_id)
            if scripted is not None:
                return scripted[0]
            if session_id not in self.sessions:
                return _not_found()
            return {"state": self.sessions[session_id]}

        @app.post(f"{BUILDER_PREFIX}/add")
        async def add(request: AddLetterRequest):
            scripted = await self._enter("add", request)
            if request.session_id not in self.sessions:
                return _not_found()
            if scripted is not None:
                self._store(request.session_id, scripted)
                return scripted[0]

            state = self.sessions[request.session_id]
            allowed = state["prefix_set"] if request.position == Position.PREFIX else state["suffix_set"]
            if request.letter not in allowed:
                return {
                    "success": False,
                    "message": f"Letter '{request.letter}' cannot be added as {request.position.value}",
                }
            if request.position == Position.PREFIX:
                answer = request.letter + state["answer"]
            else:
                answer = state["answer"] + request.letter
            self.sessions[request.session_id] = snapshot(answer, state["step"] + 1, self.words)
            return {"success": True, "state": self.sessions[request.session_id], "message": "Letter added."}

        @app.post(f"{BUILDER_PREFIX}/remove")
        async def remove(request: RemoveLetterRequest):
            scripted = await self._enter("remove", request)
            if request.session_id not in self.sessions:
                return _not_found()
            if scripted is not None:
                self._store(request.session_id, scripted)
                return scripted[0]

            state = self.sessions[request.session_id]
            answer = state["answer"]
            if not 0 <= request.index < len(answer):
                return JSONResponse(status_code=400, content={"error": "Index out of range"})
            answer = answer[:request.index] + answer[request.index + 1:]
            self.sessions[request.session_id] = snapshot(answer, state["step"] + 1, self.words)
            return {"success": True, "state": self.sessions[request.session_id], "message": "Letter removed."}

        @app.post(f"{BUILDER_PREFIX}/reset")
        async def reset(request: ResetRequest):
            scripted = await self._enter("reset", request)
            if request.session_id not in self.sessions:
                return _not_found()
            if scripted is not None:
                self._store(request.session_id, scripted)
                return scripted[0]
            self.sessions[request.session_id] = snapshot("", 0, self.words)
            return {
                "success": True,
                "state": self.sessions[request.session_id],
                "message": "Word builder has been reset.",
            }

        @app.get(DICTIONARY_PREFIX + "/complete/{word}")
        async def complete(word: str):
            scripted = await self._enter("complete", word)
            if scripted is not None:
                return scripted[0]
            if word in self.failing_words:
                return JSONResponse(status_code=500, content={"error": "lookup failed"})
            return {**_details(word), "imageUrl": f"https://images.test/{word}.jpg"}

        @app.get(DICTIONARY_PREFIX + "/details/{word}")
        async def details(word: str):
            scripted = await self._enter("details", word)
            if scripted is not None:
                return scripted[0]
            return _details(word)

        @app.get(DICTIONARY_PREFIX + "/image/{word}")
        async def image(word: str):
            scripted = await self._enter("image", word)
            if scripted is not None:
                return scripted[0]
            if word not in self.words:
                return JSONResponse(status_code=404, content={"error": "No images found for this word"})
            return {"imageUrl": f"https://images.test/{word}.jpg"}

        return app


def _not_found() -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": "Session not found"})


def _details(word: str) -> dict[str, str]:
    return {
        "pronunciation": word,
        "audio": f"https://audio.test/{word}.mp3",
        "meaning": f"Meaning of {word}",
        "example": f"An example with {word}.",
    }
