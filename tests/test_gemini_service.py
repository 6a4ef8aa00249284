import asyncio
import base64

import pytest
from google.generativeai.types import HarmBlockThreshold, HarmCategory

from problem_solver.services.ai import gemini_service
from problem_solver.services.ai.gemini_service import GeminiService


class FakeResponse:
    def __init__(self, text=None, blocked=False):
        self._text = text
        self._blocked = blocked

    @property
    def text(self):
        if self._blocked:
            raise ValueError("The response was blocked")
        return self._text


@pytest.fixture
def fake_model(monkeypatch):
    """Replace the Gemini SDK model and capture what is sent to it"""
    captured = {"configured_keys": [], "models": [], "contents": []}
    outcome = {"response": FakeResponse("$$x = 2$$"), "error": None}

    class FakeModel:
        def __init__(self, **kwargs):
            captured["models"].append(kwargs)

        async def generate_content_async(self, content):
            captured["contents"].append(content)
            if outcome["error"] is not None:
                raise outcome["error"]
            return outcome["response"]

    monkeypatch.setattr(gemini_service.genai, "configure", lambda api_key: captured["configured_keys"].append(api_key))
    monkeypatch.setattr(gemini_service, "GenerativeModel", FakeModel)
    captured["outcome"] = outcome
    return captured


def test_text_prompt_uses_fixed_generation_settings(fake_model):
    service = GeminiService(api_keys=["secret-key-1"], model_name="gemini-1.5-flash")

    response = asyncio.run(service.solve("Solve x + 1 = 3"))

    assert response.success is True
    assert response.content == "$$x = 2$$"
    assert response.metadata["api_key_prefix"] == "secret-k..."
    assert fake_model["configured_keys"] == ["secret-key-1"]
    assert fake_model["contents"] == [[{"text": "Solve x + 1 = 3"}]]

    model_kwargs = fake_model["models"][0]
    assert model_kwargs["model_name"] == "gemini-1.5-flash"
    assert model_kwargs["generation_config"] == {
        "temperature": 0.4,
        "top_k": 32,
        "top_p": 1,
        "max_output_tokens": 2048,
    }
    assert model_kwargs["safety_settings"] == {
        HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    }


def test_image_sent_as_inline_jpeg(fake_model):
    service = GeminiService(api_keys=["secret-key-1"])
    image_b64 = base64.b64encode(b"\xff\xd8\xffjpeg").decode()

    asyncio.run(service.solve("What is this?", image_data=image_b64))

    assert fake_model["contents"][0] == [
        {"text": "What is this?"},
        {"inline_data": {"mime_type": "image/jpeg", "data": b"\xff\xd8\xffjpeg"}},
    ]


def test_api_error_returned_not_raised(fake_model):
    fake_model["outcome"]["error"] = RuntimeError("429 Resource has been exhausted")
    service = GeminiService(api_keys=["secret-key-1"])

    response = asyncio.run(service.solve("2 + 2?"))

    assert response.success is False
    assert response.error == "429 Resource has been exhausted"
    assert len(fake_model["contents"]) == 1


def test_blocked_response_is_a_failure(fake_model):
    fake_model["outcome"]["response"] = FakeResponse(blocked=True)

    response = asyncio.run(GeminiService(api_keys=["secret-key-1"]).solve("2 + 2?"))

    assert response.success is False
    assert "blocked" in response.error


def test_without_keys_every_call_fails(fake_model):
    service = GeminiService(api_keys=[])

    response = asyncio.run(service.solve("2 + 2?"))

    assert service.is_available() is False
    assert response.success is False
    assert "not configured" in response.error
    assert fake_model["contents"] == []
