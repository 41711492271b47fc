import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from marketing_planner.services import ai_service as ai_mod
from marketing_planner.services.ai_service import AIProvider, AIProviderError, AIService, to_langchain_messages


class FakeModel:
    def __init__(self, name, reply=None, error=None):
        self.model = name
        self.reply = reply
        self.error = error
        self.calls = 0
        self.overrides = {}

    def model_copy(self, update=None):
        copy = FakeModel(self.model, self.reply, self.error)
        copy.overrides = dict(update or {})
        copy.parent = self
        return copy

    async def ainvoke(self, prompt_value):
        target = getattr(self, "parent", self)
        target.calls += 1
        target.last_overrides = self.overrides
        if self.error:
            raise self.error
        return AIMessage(content=self.reply, usage_metadata={"input_tokens": 5, "output_tokens": 7, "total_tokens": 12})


def _service(models):
    service = AIService.__new__(AIService)
    service.models = models
    return service


def _configure_order(monkeypatch, primary, secondary, tertiary):
    monkeypatch.setattr(ai_mod.settings, "PRIMARY_AI_PROVIDER", primary)
    monkeypatch.setattr(ai_mod.settings, "SECONDARY_AI_PROVIDER", secondary)
    monkeypatch.setattr(ai_mod.settings, "TERTIARY_AI_PROVIDER", tertiary)


@pytest.mark.asyncio
async def test_fails_over_to_next_provider(monkeypatch):
    _configure_order(monkeypatch, "gemini", "openai", "groq")
    gemini = FakeModel("gemini-test", error=RuntimeError("quota exceeded"))
    openai = FakeModel("gpt-test", reply='{"ok": true}')
    service = _service({AIProvider.GEMINI: gemini, AIProvider.OPENAI: openai})

    response = await service.generate_response([{"role": "user", "content": "hi"}])

    assert response.provider == "openai"
    assert response.model == "gpt-test"
    assert response.content == '{"ok": true}'
    assert response.tokens_used == 12
    assert gemini.calls == 1
    assert openai.calls == 1


@pytest.mark.asyncio
async def test_all_providers_failing_raises(monkeypatch):
    _configure_order(monkeypatch, "groq", "gemini", "openai")
    service = _service({AIProvider.GROQ: FakeModel("llama", error=RuntimeError("down"))})
    with pytest.raises(AIProviderError):
        await service.generate_response([{"role": "user", "content": "hi"}])


@pytest.mark.asyncio
async def test_call_overrides_do_not_touch_shared_model(monkeypatch):
    _configure_order(monkeypatch, "gemini", "openai", "groq")
    gemini = FakeModel("gemini-test", reply="done")
    service = _service({AIProvider.GEMINI: gemini})

    await service.generate_response([{"role": "user", "content": "hi"}], temperature=0.1, max_tokens=50)

    assert gemini.last_overrides == {"temperature": 0.1, "max_output_tokens": 50}
    assert gemini.overrides == {}


def test_unknown_configured_provider_is_skipped(monkeypatch):
    _configure_order(monkeypatch, "claude", "openai", "openai")
    service = _service({AIProvider.GROQ: FakeModel("llama"), AIProvider.OPENAI: FakeModel("gpt")})
    assert service.provider_order() == [AIProvider.OPENAI, AIProvider.GROQ]


def test_message_conversion():
    converted = to_langchain_messages([
        {"role": "system", "content": "be brief"},
        {"role": "user", "content": "hello"},
        {"role": "tool", "content": "ignored"},
    ])
    assert [type(m) for m in converted] == [SystemMessage, HumanMessage]
