from typing import Any, Dict, Optional

import orjson
from pydantic import BaseModel

from app.core.config import Settings


def _default(obj: Any) -> Any:
    """orjson이 직접 처리하지 못하는 값 변환 (pydantic 모델)"""
    if isinstance(obj, BaseModel):
        return obj.model_dump()
    raise TypeError(f"직렬화할 수 없는 타입입니다: {type(obj).__name__}")


def serialize(payload: Any) -> str:
    """
    응답 페이로드를 JSON 문자열로 직렬화
    - None은 빈 본문이 아니라 'null'
    """
    return orjson.dumps(payload, default=_default).decode("utf-8")


def build_headers(settings: Settings, refreshed_token: Optional[str] = None) -> Dict[str, str]:
    """CORS/자격 증명 고정 헤더 + 선택적 토큰 갱신 헤더"""
    headers = {
        "Access-Control-Allow-Origin": settings.ALLOW_ORIGIN,
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Expose-Headers": settings.REFRESH_TOKEN_HEADER,
        "Content-Type": "application/json; charset=utf-8",
    }
    if refreshed_token:
        headers[settings.REFRESH_TOKEN_HEADER] = refreshed_token
    return headers


def build_response(
        payload: Any,
        status_code: int,
        settings: Settings,
        refreshed_token: Optional[str] = None,
) -> Dict[str, Any]:
    """
    결과/오류를 게이트웨이 응답 형식 {statusCode, headers, body}로 감싸기
    """
    return {
        "statusCode": status_code,
        "headers": build_headers(settings, refreshed_token),
        "body": serialize(payload),
    }
