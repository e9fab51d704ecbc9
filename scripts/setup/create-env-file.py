#!/usr/bin/env python3
"""로컬 개발용 .env 파일 생성 (기존 파일은 .env.backup으로 백업)"""
import os
from pathlib import Path

# 프로젝트 루트
project_root = Path(__file__).parent.parent.parent
env_file = project_root / ".env"

# 민감 정보는 <...> 자리에 직접 입력
env_content = """# Database
DATABASE_URL=postgresql+asyncpg://<DB_USER>:<DB_PASSWORD>@localhost:5432/lms_db

# CORS
ALLOWED_ORIGINS=http://localhost:5173

# Environment
# development에서는 500 응답에 상세 에러 메시지 포함
ENVIRONMENT=development

# Logging (비워두면 development는 DEBUG, 그 외 INFO)
LOG_LEVEL=
LOG_DIR=/app/logs

# Gemini (비워두면 AI 피드백/태깅/리포트는 fallback 문구로 동작)
GEMINI_API_KEY=
GEMINI_MODEL=gemini-2.5-flash
GEMINI_MAX_CONCURRENT=2
AI_TIMEOUT_SECONDS=20
AI_MAX_RETRIES=3

# Quiz defaults
DEFAULT_PASSING_SCORE=70
DEFAULT_MAX_ATTEMPTS=1

# Rate limit (IP당 15분에 100회)
RATE_LIMIT_ENABLED=true
RATE_LIMIT_MAX_REQUESTS=100
RATE_LIMIT_WINDOW_SECONDS=900
RATE_LIMIT_STORAGE_URI=memory://
"""


def create_env_file():
    """.env 파일 생성 (UTF-8, BOM 없음)"""
    print(f"[INFO] .env 파일 생성 중: {env_file}")

    if env_file.exists():
        backup_file = project_root / ".env.backup"
        print(f"[INFO] 기존 .env 파일 백업: {backup_file}")
        backup_file.write_text(env_file.read_text(encoding="utf-8"), encoding="utf-8")

    with open(env_file, "w", encoding="utf-8", newline="\n") as f:
        f.write(env_content)

    print(f"[OK] .env 파일 생성 완료: {env_file}")

    # Windows에서는 chmod 스킵
    if os.name != "nt":
        os.chmod(env_file, 0o600)
        print("[INFO] 파일 권한 설정: 600")


if __name__ == "__main__":
    try:
        create_env_file()
    except OSError as e:
        print(f"\n[ERROR] .env 파일 생성 실패: {e.__class__.__name__}: {e}")
        raise SystemExit(1)
