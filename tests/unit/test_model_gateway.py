from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from google.genai import errors, types
import pytest

from oracle_pipeline.config import DEFAULT_REFUSAL_PHRASES
from oracle_pipeline.core.exceptions import ModelRefusedError, ModelUnavailableError
from oracle_pipeline.core.types import GenerationOptions, InlineImage
from oracle_pipeline.gateway import ModelGateway, OfflineAdapter, looks_like_refusal
from oracle_pipeline.gateway.gemini import GoogleGenAIAdapter
from oracle_pipeline.telemetry import SimpleReporter, TelemetryContext
from tests.fakes import HANG, ScriptedAdapter

pytestmark = pytest.mark.unit

OPTIONS = GenerationOptions(model="gemini-2.0-flash")


def _gateway(adapter, **kwargs):
    kwargs.setdefault("refusal_phrases", DEFAULT_REFUSAL_PHRASES)
    return ModelGateway(adapter, **kwargs)


# --- Refusal detection ---


@pytest.mark.parametrize(
    "text, expected",
    [
        ("I'm sorry, but I can't help with that.", True),
        ("As an AI, I cannot predict the future.", True),
        ('{"message": "I\'m sorry you feel this way"}', False),
        ('```json\n{"message": "I cannot wait"}\n```', False),
        ("Your stars shine brightly today.", False),
    ],
)
def test_looks_like_refusal(text, expected):
    assert looks_like_refusal(text, DEFAULT_REFUSAL_PHRASES) is expected


# --- Gateway ---


@pytest.mark.asyncio
async def test_call_returns_adapter_text_and_forwards_arguments():
    adapter = ScriptedAdapter('{"sign": "Leo"}')

    text = await _gateway(adapter).call("system", "user", OPTIONS)

    assert text == '{"sign": "Leo"}'
    assert adapter.calls == [("system", "user", OPTIONS)]


@pytest.mark.asyncio
async def test_timeout_becomes_model_unavailable():
    gateway = _gateway(ScriptedAdapter(HANG), timeout_seconds=0.01)

    with pytest.raises(ModelUnavailableError, match="timed out"):
        await gateway.call("system", "user", OPTIONS)


@pytest.mark.asyncio
async def test_unexpected_adapter_errors_are_normalized():
    gateway = _gateway(ScriptedAdapter(ConnectionResetError("reset by peer")))

    with pytest.raises(ModelUnavailableError, match="reset by peer") as excinfo:
        await gateway.call("system", "user", OPTIONS)

    assert isinstance(excinfo.value.__cause__, ConnectionResetError)


@pytest.mark.asyncio
async def test_model_errors_from_the_adapter_pass_through():
    gateway = _gateway(ScriptedAdapter(ModelRefusedError("blocked")))

    with pytest.raises(ModelRefusedError, match="blocked"):
        await gateway.call("system", "user", OPTIONS)


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["", "   \n"])
async def test_empty_completion_is_unavailable(text):
    with pytest.raises(ModelUnavailableError, match="empty"):
        await _gateway(ScriptedAdapter(text)).call("system", "user", OPTIONS)


@pytest.mark.asyncio
async def test_prose_refusal_raises_refused():
    gateway = _gateway(ScriptedAdapter("I'm sorry, I cannot provide astrological advice."))

    with pytest.raises(ModelRefusedError):
        await gateway.call("system", "user", OPTIONS)


@pytest.mark.asyncio
async def test_json_quoting_a_refusal_phrase_is_returned():
    payload = '{"message": "I\'m sorry for your loss; healing is near."}'

    text = await _gateway(ScriptedAdapter(payload)).call("system", "user", OPTIONS)

    assert text == payload


@pytest.mark.asyncio
async def test_refusal_phrases_are_configurable():
    gateway = ModelGateway(ScriptedAdapter("Not today."), refusal_phrases=("NOT TODAY",))

    with pytest.raises(ModelRefusedError):
        await gateway.call("system", "user", OPTIONS)


@pytest.mark.asyncio
async def test_each_call_is_timed():
    reporter = SimpleReporter()
    gateway = _gateway(
        ScriptedAdapter("{}"), telemetry=TelemetryContext(reporter, enabled=True)
    )

    await gateway.call("system", "user", OPTIONS)

    assert len(reporter.timings["gateway.call"]) == 1


def test_timeout_must_be_positive():
    with pytest.raises(ValueError, match="positive"):
        ModelGateway(OfflineAdapter(), timeout_seconds=0)


@pytest.mark.asyncio
async def test_offline_adapter_is_always_unavailable():
    with pytest.raises(ModelUnavailableError, match="disabled"):
        await OfflineAdapter().generate("system", "user", OPTIONS)


# --- Gemini adapter ---


def _response(text='{"ok": true}', *, block_reason=None, finish_reason="STOP"):
    return SimpleNamespace(
        text=text,
        prompt_feedback=SimpleNamespace(block_reason=block_reason),
        candidates=[SimpleNamespace(finish_reason=SimpleNamespace(name=finish_reason))],
    )


def _fake_client(response=None, side_effect=None):
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(
        return_value=response, side_effect=side_effect
    )
    return client


@pytest.mark.asyncio
async def test_gemini_adapter_sends_system_instruction_and_json_mode():
    client = _fake_client(_response())
    adapter = GoogleGenAIAdapter(client=client)
    options = GenerationOptions(model="gemini-2.0-flash", temperature=0.9, max_output_tokens=100)

    text = await adapter.generate("be wise", "read for Leo", options)

    assert text == '{"ok": true}'
    kwargs = client.aio.models.generate_content.await_args.kwargs
    assert kwargs["model"] == "gemini-2.0-flash"
    assert kwargs["contents"] == ["read for Leo"]
    config = kwargs["config"]
    assert config.system_instruction == "be wise"
    assert config.temperature == 0.9
    assert config.max_output_tokens == 100
    assert config.response_mime_type == "application/json"


@pytest.mark.asyncio
async def test_gemini_adapter_puts_the_image_before_the_text():
    client = _fake_client(_response())
    adapter = GoogleGenAIAdapter(client=client)
    options = GenerationOptions(
        model="gemini-2.0-flash", image=InlineImage(b"\xff\xd8\xff", "image/jpeg")
    )

    await adapter.generate("s", "read this palm", options)

    contents = client.aio.models.generate_content.await_args.kwargs["contents"]
    assert isinstance(contents[0], types.Part)
    assert contents[0].inline_data.mime_type == "image/jpeg"
    assert contents[1] == "read this palm"


@pytest.mark.asyncio
async def test_gemini_block_reason_is_a_refusal():
    adapter = GoogleGenAIAdapter(client=_fake_client(_response(block_reason="SAFETY")))

    with pytest.raises(ModelRefusedError, match="SAFETY"):
        await adapter.generate("s", "u", OPTIONS)


@pytest.mark.asyncio
async def test_gemini_safety_finish_reason_is_a_refusal():
    adapter = GoogleGenAIAdapter(
        client=_fake_client(_response(text=None, finish_reason="PROHIBITED_CONTENT"))
    )

    with pytest.raises(ModelRefusedError, match="PROHIBITED_CONTENT"):
        await adapter.generate("s", "u", OPTIONS)


@pytest.mark.asyncio
async def test_gemini_api_errors_become_unavailable_with_status():
    error = errors.APIError(
        503, {"error": {"code": 503, "message": "overloaded", "status": "UNAVAILABLE"}}
    )
    adapter = GoogleGenAIAdapter(client=_fake_client(side_effect=error))

    with pytest.raises(ModelUnavailableError) as excinfo:
        await adapter.generate("s", "u", OPTIONS)

    assert excinfo.value.status_code == 503


def test_gemini_adapter_requires_credentials():
    with pytest.raises(ValueError, match="api_key"):
        GoogleGenAIAdapter()

