import asyncio
import logging
import random

from google import genai
from google.genai import types
from google.genai.errors import ClientError, ServerError

from app.core.config import settings
from app.exceptions import AIServiceError
from app.schemas.ai import AITextGenerationRequest

logger = logging.getLogger(__name__)

_gemini_client: genai.Client | None = None
# 동시 Gemini API 요청 수 제한 (과부하 방지)
_gemini_semaphore: asyncio.Semaphore | None = None


def is_ai_enabled() -> bool:
    """API 키가 설정된 경우에만 외부 호출"""
    return settings.ai_enabled


def get_gemini_client() -> genai.Client:
    """Gemini 클라이언트 싱글톤"""
    global _gemini_client
    if _gemini_client is None:
        if not settings.gemini_api_key:
            raise AIServiceError("GEMINI_API_KEY가 설정되지 않았습니다")
        _gemini_client = genai.Client(api_key=settings.gemini_api_key)
    return _gemini_client


def get_gemini_semaphore() -> asyncio.Semaphore:
    """Gemini API 동시 요청 제한 Semaphore 싱글톤"""
    global _gemini_semaphore
    if _gemini_semaphore is None:
        _gemini_semaphore = asyncio.Semaphore(settings.gemini_max_concurrent)
        logger.info(f"Gemini API 동시 요청 제한 설정: 최대 {settings.gemini_max_concurrent}개")
    return _gemini_semaphore


def _is_overloaded(error: ServerError) -> bool:
    message = str(error)
    return "503" in message or "UNAVAILABLE" in message or "overloaded" in message.lower()


async def generate_text(request: AITextGenerationRequest) -> str:
    """Gemini로 텍스트 생성 (타임아웃, 503 재시도, 동시 요청 제한)

    실패하면 항상 AIServiceError를 발생시킨다. 호출한 쪽에서 fallback 값으로 대체한다.
    """
    if not is_ai_enabled():
        raise AIServiceError("GEMINI_API_KEY가 설정되지 않았습니다")

    client = get_gemini_client()
    semaphore = get_gemini_semaphore()
    config = types.GenerateContentConfig(
        max_output_tokens=request.max_output_tokens,
        temperature=request.temperature,
    )

    max_retries = settings.ai_max_retries
    base_delay = 1.0
    max_delay = 8.0

    async with semaphore:
        for attempt in range(max_retries):
            try:
                # Gemini SDK 호출은 동기 API이므로 executor에서 실행
                loop = asyncio.get_running_loop()
                response = await asyncio.wait_for(
                    loop.run_in_executor(
                        None,
                        lambda: client.models.generate_content(
                            model=settings.gemini_model,
                            contents=request.prompt,
                            config=config,
                        ),
                    ),
                    timeout=settings.ai_timeout_seconds,
                )

                text = (response.text or "").strip()
                if not text:
                    raise AIServiceError("AI 응답이 비어있습니다")

                if attempt > 0:
                    logger.info(f"Gemini API 호출 성공 (시도 {attempt + 1}/{max_retries})")
                return text

            except asyncio.TimeoutError:
                logger.warning(f"Gemini API 타임아웃 ({settings.ai_timeout_seconds}초 초과)")
                raise AIServiceError("AI 응답 시간이 초과되었습니다")
            except ServerError as e:
                if _is_overloaded(e) and attempt < max_retries - 1:
                    # 지수 백오프 + jitter (±20%)
                    delay = min(base_delay * (2 ** attempt), max_delay)
                    jitter = delay * 0.2 * (random.random() * 2 - 1)
                    delay_with_jitter = max(0.5, delay + jitter)
                    logger.warning(
                        f"Gemini API 503 에러 발생 (시도 {attempt + 1}/{max_retries}). "
                        f"{delay_with_jitter:.1f}초 후 재시도합니다."
                    )
                    await asyncio.sleep(delay_with_jitter)
                    continue
                logger.error(f"Gemini API ServerError: {str(e)[:200]}")
                raise AIServiceError("AI 서비스가 일시적으로 과부하 상태입니다") from e
            except ClientError as e:
                logger.error(
                    f"Gemini API ClientError: status_code={getattr(e, 'code', 'unknown')}, "
                    f"error_type={type(e).__name__}"
                )
                raise AIServiceError("AI 요청이 거부되었습니다") from e
            except AIServiceError:
                raise
            except Exception as e:
                logger.error(
                    f"Gemini API 호출 중 예외 발생: error_type={type(e).__name__}, "
                    f"error_message={str(e)[:200]}"
                )
                raise AIServiceError("AI 호출 중 오류가 발생했습니다") from e

    raise AIServiceError("AI 호출 재시도 횟수를 초과했습니다")
