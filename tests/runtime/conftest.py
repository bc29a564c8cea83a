"""Runtime fixtures: a provider that replays scripted turns."""

import asyncio
from typing import Any

import pytest
from pydantic import Field

from rosie.providers.base import Done, Provider


class ScriptedProvider(Provider):
    """
    Replays one scripted event list per model call.

    An entry may be an async callable instead of an event; it is awaited in
    place, which lets a test hold the stream open.
    """

    name: str = "scripted"
    model_name: str = "scripted-1"
    turns: list[list[Any]] = Field(default_factory=list)
    calls: list[list[Any]] = Field(default_factory=list)

    async def _stream(self, messages, tools, system_prompt, max_tokens, abort_signal):
        self.calls.append(list(messages))
        events = self.turns.pop(0) if self.turns else [Done()]
        for event in events:
            if callable(event):
                await event()
                continue
            yield event


@pytest.fixture
def scripted():
    def factory(*turns) -> ScriptedProvider:
        return ScriptedProvider(turns=[list(turn) for turn in turns])

    return factory


@pytest.fixture
def gate():
    """An (entered, release) pair of events for holding a stream open."""
    entered = asyncio.Event()
    release = asyncio.Event()

    async def hold():
        entered.set()
        await release.wait()

    return entered, release, hold
