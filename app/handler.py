"""
서버리스 진입점

- handler: API 게이트웨이 이벤트 → {statusCode, headers, body}
- init_schema: 테이블 생성 및 기초 데이터 적재 (배포 후 한 번 호출)
"""

import logging
from functools import lru_cache
from typing import Any, Dict, Optional

from app.core.config import get_settings
from app.core.database import get_database
from app.core.logging_config import configure_logging
from app.core.router import Dispatcher
from app.routers.registry import build_routes
from app.utils.async_utils import run_async

logger = logging.getLogger(__name__)


@lru_cache()
def get_dispatcher() -> Dispatcher:
    """
    프로세스당 하나의 디스패처 (설정, 경로 테이블, 커넥션 풀 재사용)
    """
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    return Dispatcher(settings, get_database(), build_routes(settings))


def _remaining_time_ms(context: Any) -> Optional[int]:
    getter = getattr(context, "get_remaining_time_in_millis", None)
    return getter() if callable(getter) else None


def handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    return run_async(get_dispatcher().dispatch(event, _remaining_time_ms(context)))


def init_schema(event: Optional[Dict[str, Any]] = None, context: Any = None) -> Dict[str, Any]:
    """테이블 생성 + 비어 있는 기초 데이터 테이블 채우기"""
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    run_async(get_database().init_schema())
    logger.info("스키마 초기화 완료")
    return {"statusCode": 200, "body": "null"}
