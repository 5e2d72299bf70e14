"""Tests for the generation queue, rate-limit backoff, and backends (no external APIs required)."""

from __future__ import annotations

import json
import threading
import time
from unittest.mock import MagicMock, patch

import httpx
import pytest
from anthropic.types import TextBlock

from highlight_reel.config import Settings
from highlight_reel.errors import GenerationFailure, RateLimitRetriesExhausted
from highlight_reel.generation.backends import (
    AnthropicBackend,
    GeminiBackend,
    OllamaBackend,
    get_generation_backend,
)
from highlight_reel.generation.queue import (
    RETRY_PENALTY_MS,
    GenerationClient,
    GenerationQueue,
    parse_rate_limit_wait_ms,
)

RATE_LIMITED = "429 Resource exhausted. Please retry in 12.5s."


class _Flaky:
    """Callable that raises the given errors in turn, then returns ``result``."""

    def __init__(self, errors: list[Exception], result: str = "ok") -> None:
        self.errors = list(errors)
        self.result = result
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


# ---------------------------------------------------------------------------
# Rate-limit parsing
# ---------------------------------------------------------------------------


class TestParseRateLimitWait:
    def test_fractional_seconds_round_up_to_whole_second(self) -> None:
        assert parse_rate_limit_wait_ms("quota exceeded ... retry in 12.5s") == 13000

    def test_long_fraction_rounds_to_next_second(self) -> None:
        assert parse_rate_limit_wait_ms("Please retry in 58.384186637s.") == 59000

    def test_whole_seconds_case_insensitive(self) -> None:
        assert parse_rate_limit_wait_ms("RETRY IN 3s") == 3000

    @pytest.mark.parametrize("message", ["connection refused", "retry later", "retry in soon"])
    def test_not_a_rate_limit(self, message: str) -> None:
        assert parse_rate_limit_wait_ms(message) is None


# ---------------------------------------------------------------------------
# GenerationQueue
# ---------------------------------------------------------------------------


class TestGenerationQueue:
    def test_returns_result(self) -> None:
        with GenerationQueue() as queue:
            assert queue.submit(lambda: "done") == "done"

    def test_rate_limit_retries_with_escalating_penalty(self) -> None:
        """Each retry of the same request waits the hint plus 60s per earlier retry."""
        sleeps: list[float] = []
        request = _Flaky([RuntimeError(RATE_LIMITED), RuntimeError(RATE_LIMITED)])

        with GenerationQueue(sleep=sleeps.append) as queue:
            assert queue.submit(request) == "ok"

        assert request.calls == 3
        assert sleeps == [13.0, 13.0 + RETRY_PENALTY_MS / 1000]

    def test_non_rate_limit_error_becomes_generation_failure(self) -> None:
        sleeps: list[float] = []
        request = _Flaky([RuntimeError("model not found")])

        with GenerationQueue(sleep=sleeps.append) as queue:
            with pytest.raises(GenerationFailure, match="model not found") as exc_info:
                queue.submit(request)

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert request.calls == 1
        assert sleeps == []

    def test_generation_failure_propagates_unchanged(self) -> None:
        failure = GenerationFailure("Ollama API error: 500")
        with GenerationQueue() as queue:
            with pytest.raises(GenerationFailure) as exc_info:
                queue.submit(_Flaky([failure]))
        assert exc_info.value is failure

    def test_retry_cap(self) -> None:
        sleeps: list[float] = []
        request = _Flaky([RuntimeError(RATE_LIMITED)] * 10)

        with GenerationQueue(sleep=sleeps.append, max_retries=2) as queue:
            with pytest.raises(RateLimitRetriesExhausted) as exc_info:
                queue.submit(request)

        assert exc_info.value.attempts == 3
        assert request.calls == 3
        assert len(sleeps) == 2

    def test_zero_retry_cap_fails_fast(self) -> None:
        with GenerationQueue(sleep=lambda s: None, max_retries=0) as queue:
            with pytest.raises(RateLimitRetriesExhausted):
                queue.submit(_Flaky([RuntimeError(RATE_LIMITED)]))

    def test_negative_retry_cap_rejected(self) -> None:
        with pytest.raises(ValueError):
            GenerationQueue(max_retries=-1)

    def test_requests_complete_in_submission_order(self) -> None:
        order: list[int] = []
        with GenerationQueue() as queue:
            for i in range(5):
                queue.submit(lambda i=i: order.append(i))
        assert order == [0, 1, 2, 3, 4]

    def test_one_request_in_flight_across_threads(self) -> None:
        """Concurrent submitters never overlap inside the backend."""
        lock = threading.Lock()
        active = 0
        peak = 0

        def request() -> str:
            nonlocal active, peak
            with lock:
                active += 1
                peak = max(peak, active)
            time.sleep(0.01)
            with lock:
                active -= 1
            return "ok"

        results: list[str] = []
        with GenerationQueue() as queue:
            threads = [threading.Thread(target=lambda: results.append(queue.submit(request))) for _ in range(8)]
            for t in threads:
                t.start()
            for t in threads:
                t.join()

        assert results == ["ok"] * 8
        assert peak == 1

    def test_rate_limit_sleep_blocks_later_requests(self) -> None:
        """A request waiting out a rate limit holds the queue until it succeeds."""
        events: list[str] = []
        first_started = threading.Event()
        release = threading.Event()

        def first() -> str:
            if not first_started.is_set():
                first_started.set()
                raise RuntimeError(RATE_LIMITED)
            events.append("first")
            return "first"

        def sleep(_seconds: float) -> None:
            release.wait(timeout=5)
            events.append("slept")

        with GenerationQueue(sleep=sleep) as queue:
            t = threading.Thread(target=queue.submit, args=(first,))
            t.start()
            first_started.wait(timeout=5)
            second = threading.Thread(target=queue.submit, args=(lambda: events.append("second"),))
            second.start()
            release.set()
            t.join()
            second.join()

        assert events == ["slept", "first", "second"]


class TestGenerationClient:
    def test_routes_prompt_through_queue(self) -> None:
        backend = MagicMock()
        backend.generate_content.return_value = "summary text"
        with GenerationQueue() as queue:
            client = GenerationClient(backend, queue)
            assert client.generate("Summarize this") == "summary text"
        backend.generate_content.assert_called_once_with("Summarize this")


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------


def _ollama(handler) -> OllamaBackend:
    return OllamaBackend(
        api_url="http://ollama.test:11434/",
        model_name="gemma3:12b",
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


class TestOllamaBackend:
    def test_generate(self) -> None:
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"response": "A short summary.", "done": True})

        assert _ollama(handler).generate_content("Summarize") == "A short summary."
        assert seen["url"] == "http://ollama.test:11434/api/generate"
        assert seen["body"] == {"model": "gemma3:12b", "prompt": "Summarize", "stream": False}

    def test_error_response_with_json_details(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"error": "model 'gemma3:12b' not found"})

        with pytest.raises(GenerationFailure) as exc_info:
            _ollama(handler).generate_content("hi")

        message = str(exc_info.value)
        assert message.startswith("Ollama API error: 404 Not Found - ")
        assert "not found" in message

    def test_error_response_with_text_details(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="upstream crashed")

        with pytest.raises(GenerationFailure, match="500 Internal Server Error - upstream crashed"):
            _ollama(handler).generate_content("hi")

    def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(GenerationFailure, match="Ollama request failed"):
            _ollama(handler).generate_content("hi")


class TestAnthropicBackend:
    def test_requires_key(self) -> None:
        with pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
            AnthropicBackend(api_key="", model_name="claude-sonnet-4-20250514")

    def test_returns_text_block(self) -> None:
        backend = AnthropicBackend(api_key="test-key", model_name="claude-sonnet-4-20250514")
        backend.client = MagicMock()
        backend.client.messages.create.return_value = MagicMock(
            content=[TextBlock(type="text", text="[]")]
        )

        assert backend.generate_content("Find highlights") == "[]"
        kwargs = backend.client.messages.create.call_args.kwargs
        assert kwargs["messages"] == [{"role": "user", "content": "Find highlights"}]

    def test_non_text_block_fails(self) -> None:
        backend = AnthropicBackend(api_key="test-key", model_name="claude-sonnet-4-20250514")
        backend.client = MagicMock()
        backend.client.messages.create.return_value = MagicMock(content=[MagicMock()])

        with pytest.raises(GenerationFailure, match="TextBlock"):
            backend.generate_content("hi")


class TestGeminiBackend:
    def test_requires_key(self) -> None:
        with pytest.raises(ValueError, match="GEMINI_API_KEY"):
            GeminiBackend(api_key="")

    def test_generate(self) -> None:
        with (
            patch("google.generativeai.configure") as mock_configure,
            patch("google.generativeai.GenerativeModel") as mock_model_cls,
        ):
            mock_model_cls.return_value.generate_content.return_value = MagicMock(text="summary")
            backend = GeminiBackend(api_key="test-key", model_name="gemini-2.5-flash")
            assert backend.generate_content("Summarize") == "summary"

        mock_configure.assert_called_once_with(api_key="test-key")
        mock_model_cls.assert_called_once_with("gemini-2.5-flash")


class TestGetGenerationBackend:
    def _settings(self, **overrides) -> Settings:
        return Settings(_env_file=None, **overrides)  # type: ignore[call-arg]

    def test_defaults_to_ollama(self) -> None:
        backend = get_generation_backend(source=self._settings(ai_provider="ollama", ollama_model="llama3"))
        assert isinstance(backend, OllamaBackend)
        assert backend.model_name == "llama3"

    def test_explicit_provider_overrides_settings(self) -> None:
        backend = get_generation_backend("anthropic", source=self._settings(anthropic_api_key="test-key"))
        assert isinstance(backend, AnthropicBackend)

    def test_gemini_without_key(self) -> None:
        with pytest.raises(ValueError):
            get_generation_backend("gemini", source=self._settings(gemini_api_key=""))

    def test_unknown_provider(self) -> None:
        with pytest.raises(ValueError):
            get_generation_backend("openai", source=self._settings())


@pytest.mark.expensive
class TestLiveOllama:
    def test_generate_against_local_server(self) -> None:
        """Requires a running Ollama server with the configured model pulled."""
        backend = get_generation_backend("ollama")
        assert backend.generate_content("Reply with the single word: ready").strip()
