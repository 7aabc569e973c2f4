"""소스별 fan-out 결과 (성공 값 / 실패 원인)."""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Generic, Optional, TypeVar

from integrations.base_client import UpstreamError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class SourceResult(Generic[T]):
    source: str
    value: Optional[T] = None
    error: Optional[UpstreamError] = None
    requested: bool = True

    @property
    def ok(self) -> bool:
        return self.requested and self.error is None

    def value_or(self, default: Any = None) -> Any:
        return self.value if self.ok else default

    @classmethod
    def skipped(cls, source: str) -> "SourceResult":
        return cls(source=source, requested=False)


async def capture(source: str, call: Awaitable[T]) -> SourceResult[T]:
    """업스트림 호출 하나를 실행하고 결과/실패를 SourceResult로 감싼다."""
    try:
        return SourceResult(source=source, value=await call)
    except UpstreamError as e:
        logger.warning(f"소스 실패 [{source}]: {e}")
        return SourceResult(source=source, error=e)
    except Exception as e:
        # 정규화 버그 등 예상 밖 오류도 해당 소스만 실패 처리
        logger.exception(f"소스 처리 오류 [{source}]: {e}")
        return SourceResult(source=source, error=UpstreamError(source, e))


async def gather_sources(calls: dict[str, Optional[Awaitable]]) -> dict[str, SourceResult]:
    """요청된 호출을 동시에 실행하고 모두 끝날 때까지 기다린다.

    값이 None인 항목은 요청되지 않은 소스로 기록. 한 소스의 실패가 다른 소스를 취소하지 않는다.
    """
    names = [name for name, call in calls.items() if call is not None]
    settled = await asyncio.gather(*(capture(name, calls[name]) for name in names))

    results = {name: SourceResult.skipped(name) for name in calls}
    results.update(zip(names, settled))
    return results
