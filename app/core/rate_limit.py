"""요청 수 제한 (slowapi, 클라이언트 IP 기준)

카운터 저장소는 ``storage_uri``로 지정한다. 단일 인스턴스는 ``memory://``,
다중 인스턴스 배포는 ``redis://host:6379`` 처럼 공유 저장소를 쓴다.
"""
import logging
import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from app.core.config import settings

logger = logging.getLogger(__name__)


def build_limiter(
    max_requests: int,
    window_seconds: int,
    storage_uri: str = "memory://",
    enabled: bool = True,
) -> Limiter:
    """모든 라우트가 IP별로 하나의 한도를 공유하는 Limiter 생성"""
    return Limiter(
        key_func=get_remote_address,
        application_limits=[f"{max_requests} per {window_seconds} seconds"],
        storage_uri=storage_uri,
        headers_enabled=True,
        enabled=enabled,
    )


limiter = build_limiter(
    max_requests=settings.rate_limit_max_requests,
    window_seconds=settings.rate_limit_window_seconds,
    storage_uri=settings.rate_limit_storage_uri,
    enabled=settings.rate_limit_enabled,
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 응답 (retry_after 초 + X-RateLimit-* 헤더)

    SlowAPIMiddleware가 동기 호출하므로 일반 함수로 둔다.
    """
    app_limiter: Limiter = request.app.state.limiter
    current_limit = request.state.view_rate_limit
    limit_item, limit_args = current_limit
    window = app_limiter.limiter.get_window_stats(limit_item, *limit_args)
    retry_after = max(0, int(window[0] - time.time())) + 1

    logger.warning(
        f"요청 수 제한 초과: client={get_remote_address(request)}, "
        f"limit={exc.detail}, path={request.url.path}"
    )
    response = JSONResponse(
        status_code=429,
        content={
            "detail": "Too many requests, please try again later.",
            "retry_after": retry_after,
        },
    )
    return app_limiter._inject_headers(response, current_limit)


def setup_rate_limit(app: FastAPI, app_limiter: Limiter) -> None:
    """앱에 Limiter, 429 핸들러, 미들웨어 등록"""
    app.state.limiter = app_limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)
