from __future__ import annotations

from typing import Callable

import httpx
import pytest

from readme_forge.infrastructure.github_rest_adapter import GitHubRestAdapter
from readme_forge.infrastructure.request_gate import RequestGate

Reply = str | BaseException | Callable[[str, str], str]


class FakeLlm:
    """LlmGateway double that records every call and replays canned output."""

    def __init__(self, reply: Reply = "{}") -> None:
        self._reply = reply
        self.calls: list[dict[str, object]] = []

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        json_mode: bool = True,
        temperature: float = 0.2,
    ) -> str:
        self.calls.append(
            {
                "system": system_prompt,
                "user": user_prompt,
                "json_mode": json_mode,
                "temperature": temperature,
            }
        )
        if isinstance(self._reply, BaseException):
            raise self._reply
        if callable(self._reply):
            return self._reply(system_prompt, user_prompt)
        return self._reply


async def no_sleep(seconds: float) -> None:
    return None


class RecordingSleep:
    """Awaitable sleep replacement that only records requested durations."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_llm() -> Callable[[Reply], FakeLlm]:
    """Build a FakeLlm that answers with a string, raises, or delegates to a callable."""
    return FakeLlm


@pytest.fixture
def fast_gate() -> RequestGate:
    """A gate with a frozen clock and no real sleeping."""
    return RequestGate(min_interval=1.0, clock=lambda: 1_000.0, sleep=no_sleep)


@pytest.fixture
def make_github(fast_gate: RequestGate) -> Callable[..., GitHubRestAdapter]:
    """Build a GitHubRestAdapter whose HTTP traffic goes to *handler*."""

    def _build(
        handler: Callable[[httpx.Request], httpx.Response],
        gate: RequestGate | None = None,
    ) -> GitHubRestAdapter:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return GitHubRestAdapter(client=client, gate=gate or fast_gate)

    return _build
