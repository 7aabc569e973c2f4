"""UTC 타임존 유틸리티.

업스트림 API와 응답 타임스탬프는 모두 UTC 기준.
모든 모듈에서 datetime.now() 대신 now_utc()를 사용할 것.
"""
from datetime import datetime, timezone
from typing import Optional


def now_utc() -> datetime:
    """현재 UTC 시간 반환."""
    return datetime.now(timezone.utc)


def iso_now() -> str:
    """응답용 ISO-8601 타임스탬프 (밀리초, Z 접미사)."""
    return now_utc().isoformat(timespec="milliseconds").replace("+00:00", "Z")


def from_unix_seconds(value) -> Optional[datetime]:
    """유닉스 초 (문자열 허용) → UTC datetime. 파싱 실패 시 None."""
    try:
        return datetime.fromtimestamp(int(value), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return None
