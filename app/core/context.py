from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.jwt.token_service import Identity, TokenService
from app.utils.exceptions import BadRequestError


def _to_int(value: Optional[str], name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BadRequestError(f"{name} 값은 정수여야 합니다.")


@dataclass
class RequestContext:
    """
    경로 핸들러에 전달되는 요청 단위 컨텍스트
    - identity: 인증된 요청 주체 (익명이면 None)
    - body: 파싱된 JSON 본문, data: 검증을 거친 스키마 객체 (검증 미선언 경로는 None)
    """
    settings: Settings
    session: AsyncSession
    database: Any
    token_service: TokenService
    identity: Optional[Identity] = None
    token: Optional[str] = None
    body: Any = field(default_factory=dict)
    data: Optional[BaseModel] = None
    path_params: Dict[str, str] = field(default_factory=dict)
    query_params: Dict[str, str] = field(default_factory=dict)

    @property
    def viewer(self) -> Optional[str]:
        """조회자 사용자명 (익명이면 None)"""
        return self.identity.username if self.identity else None

    def query_int(self, name: str) -> Optional[int]:
        """정수 쿼리 파라미터 (없으면 None, 정수가 아니면 BadRequestError)"""
        return _to_int(self.query_params.get(name), name)

    def path_int(self, name: str) -> int:
        value = _to_int(self.path_params.get(name), name)
        if value is None:
            raise BadRequestError(f"{name} 경로 값이 필요합니다.")
        return value


@dataclass
class HandlerResult:
    """핸들러 반환값: 도메인 페이로드 + 상태 코드"""
    payload: Any = None
    status_code: int = 200
