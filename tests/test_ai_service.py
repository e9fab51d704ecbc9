"""AI Service (Gemini 호출) 테스트"""
import time

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from google.genai.errors import ClientError, ServerError

from app.core.config import settings
from app.exceptions import AIServiceError
from app.schemas.ai import AITextGenerationRequest
from app.services import ai_service

OVERLOADED = {"error": {"code": 503, "message": "The model is overloaded.", "status": "UNAVAILABLE"}}
INTERNAL = {"error": {"code": 500, "message": "Internal error", "status": "INTERNAL"}}
BAD_REQUEST = {"error": {"code": 400, "message": "Invalid argument", "status": "INVALID_ARGUMENT"}}


@pytest.fixture
def mock_client(monkeypatch):
    """API 키를 설정하고 Gemini 클라이언트를 mock으로 교체"""
    monkeypatch.setattr(settings, "gemini_api_key", "test-key")
    monkeypatch.setattr(ai_service, "_gemini_semaphore", None)
    client = MagicMock()
    monkeypatch.setattr(ai_service, "get_gemini_client", lambda: client)
    return client


def request() -> AITextGenerationRequest:
    return AITextGenerationRequest(prompt="Say hello", max_output_tokens=50, temperature=0.2)


def test_ai_disabled_without_key():
    assert ai_service.is_ai_enabled() is False


@pytest.mark.asyncio
async def test_generate_text_disabled_raises():
    with pytest.raises(AIServiceError):
        await ai_service.generate_text(request())


@pytest.mark.asyncio
async def test_generate_text_success(mock_client):
    mock_client.models.generate_content.return_value = MagicMock(text="  Hello!  ")

    text = await ai_service.generate_text(request())

    assert text == "Hello!"
    kwargs = mock_client.models.generate_content.call_args.kwargs
    assert kwargs["model"] == settings.gemini_model
    assert kwargs["contents"] == "Say hello"
    assert kwargs["config"].max_output_tokens == 50
    assert kwargs["config"].temperature == 0.2


@pytest.mark.asyncio
async def test_generate_text_empty_response(mock_client):
    mock_client.models.generate_content.return_value = MagicMock(text=None)

    with pytest.raises(AIServiceError):
        await ai_service.generate_text(request())


@pytest.mark.asyncio
async def test_generate_text_timeout(mock_client, monkeypatch):
    monkeypatch.setattr(settings, "ai_timeout_seconds", 0.05)
    mock_client.models.generate_content.side_effect = lambda **kwargs: time.sleep(0.3)

    with pytest.raises(AIServiceError) as exc_info:
        await ai_service.generate_text(request())

    assert "시간" in exc_info.value.message


@pytest.mark.asyncio
async def test_generate_text_retries_on_overload(mock_client):
    """503은 지수 백오프 후 재시도"""
    mock_client.models.generate_content.side_effect = [
        ServerError(503, OVERLOADED),
        MagicMock(text="Recovered"),
    ]

    with patch.object(ai_service.asyncio, "sleep", new_callable=AsyncMock) as mock_sleep:
        text = await ai_service.generate_text(request())

    assert text == "Recovered"
    assert mock_sleep.await_count == 1
    assert mock_client.models.generate_content.call_count == 2


@pytest.mark.asyncio
async def test_generate_text_gives_up_after_max_retries(mock_client):
    mock_client.models.generate_content.side_effect = ServerError(503, OVERLOADED)

    with patch.object(ai_service.asyncio, "sleep", new_callable=AsyncMock) as mock_sleep:
        with pytest.raises(AIServiceError):
            await ai_service.generate_text(request())

    assert mock_client.models.generate_content.call_count == settings.ai_max_retries
    assert mock_sleep.await_count == settings.ai_max_retries - 1


@pytest.mark.asyncio
async def test_generate_text_server_error_not_retried(mock_client):
    mock_client.models.generate_content.side_effect = ServerError(500, INTERNAL)

    with pytest.raises(AIServiceError):
        await ai_service.generate_text(request())

    assert mock_client.models.generate_content.call_count == 1


@pytest.mark.asyncio
async def test_generate_text_client_error(mock_client):
    mock_client.models.generate_content.side_effect = ClientError(400, BAD_REQUEST)

    with pytest.raises(AIServiceError):
        await ai_service.generate_text(request())

    assert mock_client.models.generate_content.call_count == 1
