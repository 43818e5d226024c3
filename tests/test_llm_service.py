"""LLM 服务层单元测试。

测试覆盖:
- RateLimitedLLMService 并发门限
- LLMService 实例切换
- OpenAIService 响应处理（使用假 client，不访问网络）
"""

import threading
from types import SimpleNamespace

import pytest

from giftrec.services.llm_service import (
    GeminiService,
    LLMRateLimitError,
    LLMService,
    LLMServiceError,
    OpenAIService,
    RateLimitedLLMService,
    build_default_service,
    call_llm,
)

from conftest import MockLLMService


class BlockingLLMService:
    """在 release 之前一直阻塞的 LLM 服务。"""

    def __init__(self):
        self.entered = threading.Event()
        self.release = threading.Event()

    def call(self, prompt, *, json_mode=False, timeout=None):
        self.entered.set()
        self.release.wait(5)
        return "done"


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error:
            raise self.error
        choices = [] if self.content is None else [
            SimpleNamespace(message=SimpleNamespace(content=self.content))
        ]
        return SimpleNamespace(choices=choices)


def _openai_with(completions: FakeCompletions) -> OpenAIService:
    service = OpenAIService(model="test-model", api_key="sk-test", timeout=7)
    service._client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return service


@pytest.fixture(autouse=True)
def reset_llm_instance():
    LLMService.reset()
    yield
    LLMService.reset()


class TestRateLimitedLLMService:
    """测试并发门限。"""

    def test_passes_call_through(self, mock_llm):
        mock_llm.response = "ok"
        gate = RateLimitedLLMService(mock_llm, max_concurrency=2, queue_timeout=0.1)

        assert gate.call("hello", json_mode=True, timeout=3) == "ok"
        assert mock_llm.prompts == ["hello"]
        assert mock_llm.timeouts == [3]

    def test_saturated_gate_raises_rate_limit(self):
        """测试并发已满时快速失败并抛出可重试的限流错误。"""
        inner = BlockingLLMService()
        gate = RateLimitedLLMService(inner, max_concurrency=1, queue_timeout=0.05)
        worker = threading.Thread(target=gate.call, args=("first",))
        worker.start()
        try:
            assert inner.entered.wait(5)
            with pytest.raises(LLMRateLimitError) as exc_info:
                gate.call("second")
            assert exc_info.value.retryable
        finally:
            inner.release.set()
            worker.join(5)

        assert gate.call("third") == "done"

    def test_slot_released_after_failure(self, mock_llm):
        """测试内部调用失败后释放名额。"""
        mock_llm.should_fail = True
        mock_llm.max_failures = 1
        gate = RateLimitedLLMService(mock_llm, max_concurrency=1, queue_timeout=0.05)

        with pytest.raises(Exception):
            gate.call("boom")

        assert gate.call("again") == mock_llm.response

    def test_rejects_zero_concurrency(self, mock_llm):
        with pytest.raises(ValueError):
            RateLimitedLLMService(mock_llm, max_concurrency=0)


class TestLLMServiceFacade:
    """测试 LLMService 单例切换。"""

    def test_set_instance_and_call_llm(self):
        mock = MockLLMService()
        mock.response = "from mock"
        LLMService.set_instance(mock)

        assert LLMService.get_instance() is mock
        assert call_llm("hi", json_mode=True, timeout=2) == "from mock"
        assert mock.timeouts == [2]

    def test_reset_builds_default(self):
        LLMService.set_instance(MockLLMService())
        LLMService.reset()

        service = LLMService.get_instance()

        assert isinstance(service, RateLimitedLLMService)

    def test_build_default_service(self):
        assert isinstance(build_default_service("openai").service, OpenAIService)
        assert isinstance(build_default_service("gemini").service, GeminiService)

    def test_unknown_provider(self):
        with pytest.raises(LLMServiceError):
            build_default_service("carrier-pigeon")


class TestOpenAIService:
    """测试 OpenAIService 的响应和错误处理。"""

    def test_missing_api_key(self):
        """测试缺少 API key 时抛出不可重试错误。"""
        with pytest.raises(LLMServiceError) as exc_info:
            OpenAIService(api_key=None).call("hi")

        assert not exc_info.value.retryable

    def test_json_mode_and_timeout_forwarded(self):
        completions = FakeCompletions(content='{"items": []}')

        result = _openai_with(completions).call("prompt", json_mode=True, timeout=2.5)

        assert result == '{"items": []}'
        assert completions.kwargs["model"] == "test-model"
        assert completions.kwargs["response_format"] == {"type": "json_object"}
        assert completions.kwargs["timeout"] == 2.5

    def test_default_timeout_used(self):
        completions = FakeCompletions(content="text")

        _openai_with(completions).call("prompt")

        assert completions.kwargs["timeout"] == 7
        assert "response_format" not in completions.kwargs

    def test_empty_response_is_retryable(self):
        with pytest.raises(LLMServiceError) as exc_info:
            _openai_with(FakeCompletions(content=None)).call("prompt")

        assert exc_info.value.retryable

    def test_unexpected_error_wrapped(self):
        with pytest.raises(LLMServiceError) as exc_info:
            _openai_with(FakeCompletions(error=RuntimeError("bad payload"))).call("prompt")

        assert "bad payload" in str(exc_info.value)
        assert not exc_info.value.retryable
