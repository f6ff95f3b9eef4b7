"""Pytest configuration and fixtures for testing."""

from __future__ import annotations

from typing import Any, Generator

import pytest

from gemini_proxy.config_loader import ProxyConfig
from gemini_proxy.core import registry
from gemini_proxy.testing import FakeGeminiUpstream, ProxyHarness


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep host/port/config overrides from the developer's shell out of tests."""
    for name in ("GEMINI_PROXY_HOST", "GEMINI_PROXY_PORT", "GEMINI_PROXY_CONFIG"):
        monkeypatch.delenv(name, raising=False)
    previous = (registry.client, registry.config)
    yield
    registry.set_client(*previous)


def build_anthropic_request(
    text: str = "Hello",
    *,
    stream: bool = False,
    **extra: Any,
) -> dict[str, Any]:
    """Build a single-turn Anthropic Messages request."""
    payload: dict[str, Any] = {
        "model": "claude-3-5-sonnet",
        "max_tokens": 128,
        "messages": [{"role": "user", "content": text}],
    }
    if stream:
        payload["stream"] = True
    payload.update(extra)
    return payload


@pytest.fixture
def proxy_config() -> ProxyConfig:
    """Minimal valid config pointing at a test project."""
    return ProxyConfig(project_id="test-project")


@pytest.fixture
def upstream() -> FakeGeminiUpstream:
    return FakeGeminiUpstream()


@pytest.fixture
def harness(
    upstream: FakeGeminiUpstream, proxy_config: ProxyConfig
) -> Generator[ProxyHarness, None, None]:
    """Proxy app wired to the fake upstream.

    Usage:
        @pytest.mark.asyncio
        async def test_messages(harness, upstream):
            upstream.enqueue_text_response("Hi")
            async with harness.make_async_client() as client:
                ...
    """
    with ProxyHarness(upstream, proxy_config) as proxy:
        yield proxy
