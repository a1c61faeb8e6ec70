"""Shared fixtures for the golf coach tests."""

from __future__ import annotations

import json
import os
from typing import Any, Callable

import httpx
import pytest

# Must be in place before golf_coach.main reads it at import time.
os.environ["RATE_LIMIT_PER_IP"] = "5/minute"

from golf_coach.gemini import AnalysisClient  # noqa: E402
from golf_coach.main import limiter, templates  # noqa: E402
from golf_coach.renderer import Renderer  # noqa: E402


def gemini_envelope(payload: Any) -> dict[str, Any]:
    """Wrap ``payload`` the way generateContent returns JSON-mode output."""
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return {
        "candidates": [
            {
                "content": {"role": "model", "parts": [{"text": text}]},
                "finishReason": "STOP",
            }
        ]
    }


BEGINNER = {
    "level": "Beginner",
    "description": "Great start!",
    "tips": ["Tip A", "Tip B"],
}


@pytest.fixture
def valid_form() -> dict[str, str]:
    return {
        "score": "102",
        "frequency": "2-3 times",
        "age": "34",
        "familiarity": "4",
        "best_club": "Driver",
        "worst_club": "Putter",
    }


@pytest.fixture
def renderer() -> Renderer:
    return Renderer(templates)


@pytest.fixture
def make_client() -> Callable[..., tuple[AnalysisClient, list[httpx.Request]]]:
    """Build an AnalysisClient backed by a MockTransport.

    Returns the client and the list that collects every outbound request.
    """

    def _make(
        handler: Callable[[httpx.Request], httpx.Response],
    ) -> tuple[AnalysisClient, list[httpx.Request]]:
        seen: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        client = AnalysisClient(
            "test-key",
            model="gemini-test",
            base_url="https://gemini.test/v1beta",
            transport=httpx.MockTransport(record),
        )
        return client, seen

    return _make


@pytest.fixture
def ok_handler() -> Callable[[httpx.Request], httpx.Response]:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=gemini_envelope(BEGINNER))

    return handler


@pytest.fixture
def envelope() -> Callable[[Any], dict[str, Any]]:
    return gemini_envelope


@pytest.fixture
def beginner() -> dict[str, Any]:
    return dict(BEGINNER)


@pytest.fixture(autouse=True)
def reset_rate_limits() -> None:
    limiter.reset()
