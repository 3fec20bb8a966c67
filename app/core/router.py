"""
경로 테이블 & 디스패처

게이트웨이 이벤트(resource + httpMethod)를 핸들러로 연결하는 요청 파이프라인
    Resolve → (Warm-up) → Authorize → Parse → Validate → Execute → Finalize
"""

import asyncio
import base64
import binascii
import logging
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, Iterator, Optional, Tuple, Type

import orjson
from pydantic import BaseModel

from app.core.config import Settings
from app.core.context import HandlerResult, RequestContext
from app.core.database import Database, is_connection_error
from app.core.envelope import build_response
from app.core.gate import AuthorizationGate
from app.core.validation import ConstraintProvider, validate_body
from app.jwt.token_service import Identity, TokenService
from app.repositories.token_repository import TokenRepository
from app.utils.exceptions import (
    ApiError, BadRequestError, ConflictError, DatabaseUnavailableError,
    NotFoundError, UnauthorizedError
)
from app.utils.time_utils import utcnow

logger = logging.getLogger(__name__)

Handler = Callable[[RequestContext], Awaitable[HandlerResult]]

# ─── 예외 클래스 → Status Code 매핑 ───────────────────────────────────────
EXCEPTION_STATUS_MAP: Dict[Type[Exception], int] = {
    BadRequestError: 400,
    UnauthorizedError: 401,
    NotFoundError: 404,
    ConflictError: 409,
    DatabaseUnavailableError: 503,
}

INTERNAL_ERROR_PAYLOAD = {"detail": "Internal Server Error"}


def status_for(exc: Exception) -> int:
    """예외 계층을 따라 올라가며 매핑된 상태 코드를 찾고, 없으면 500"""
    for cls in type(exc).__mro__:
        if cls in EXCEPTION_STATUS_MAP:
            return EXCEPTION_STATUS_MAP[cls]
    return 500


@dataclass(frozen=True)
class Route:
    """
    경로 메타데이터
    - authorize: 유효한 토큰 필수 여부
    - schema/constraints: 본문 검증 스키마와 DB 기반 제약 공급자
    - warm_up: DB 접근 전 최선 노력 깨우기 단계 수행 여부
    """
    resource: str
    method: str
    handler: Handler
    authorize: bool = False
    schema: Optional[Type[BaseModel]] = None
    constraints: Optional[ConstraintProvider] = None
    warm_up: bool = False


class RouteTable:
    """(resource, method) 정확 일치 조회 테이블"""

    def __init__(self, routes: Iterable[Route]):
        self._routes: Dict[Tuple[str, str], Route] = {}
        for route in routes:
            key = (route.resource, route.method.upper())
            if key in self._routes:
                raise ValueError(f"중복된 경로입니다: {key[1]} {key[0]}")
            if route.constraints is not None and route.schema is None:
                raise ValueError(f"검증 스키마 없이 제약 공급자를 지정할 수 없습니다: {key[1]} {key[0]}")
            self._routes[key] = route

    def resolve(self, resource: Optional[str], method: Optional[str]) -> Optional[Route]:
        if not resource or not method:
            return None
        return self._routes.get((resource, method.upper()))

    def __iter__(self) -> Iterator[Route]:
        return iter(self._routes.values())

    def __len__(self) -> int:
        return len(self._routes)


def parse_body(event: Dict[str, Any]) -> Any:
    """
    이벤트 본문을 JSON으로 파싱
    - 본문이 없거나 null이면 빈 dict
    Raises:
        BadRequestError: 본문이 올바른 JSON이 아닐 때
    """
    raw = event.get("body")
    if not raw:
        return {}
    try:
        if event.get("isBase64Encoded"):
            raw = base64.b64decode(raw)
        parsed = orjson.loads(raw)
    except (orjson.JSONDecodeError, binascii.Error, ValueError):
        raise BadRequestError("요청 본문이 올바른 JSON이 아닙니다.")
    return {} if parsed is None else parsed


class Dispatcher:
    """
    요청 디스패처
    - 설정/DB/토큰 서비스는 프로세스 시작 시 한 번 만들어 주입
    - 요청마다 세션 하나를 열어 인증, 검증, 핸들러 실행에 사용
    """
    def __init__(
        self,
        settings: Settings,
        database: Database,
        routes: Iterable[Route],
        token_service: Optional[TokenService] = None,
        sampler: Callable[[], float] = random.random,
    ):
        self.settings = settings
        self.database = database
        self.table = RouteTable(routes)
        self.token_service = token_service or TokenService(settings)
        self.gate = AuthorizationGate(self.token_service)
        self._sampler = sampler

    async def dispatch(
            self,
            event: Dict[str, Any],
            remaining_time_ms: Optional[int] = None,
            housekeep: bool = True,
    ) -> Dict[str, Any]:
        """
        게이트웨이 이벤트 하나를 처리하여 {statusCode, headers, body} 반환
        - housekeep=False 이면 정리 작업은 호출 측이 응답 이후에 수행
        """
        route = self.table.resolve(event.get("resource"), event.get("httpMethod"))
        if route is None:
            logger.info("일치하는 경로 없음: %s %s", event.get("httpMethod"), event.get("resource"))
            response = build_response(None, 404, self.settings)
        else:
            response = await self._run(route, event, remaining_time_ms)

        if housekeep:
            await self.maybe_housekeep(remaining_time_ms)
        return response

    async def _run(
            self,
            route: Route,
            event: Dict[str, Any],
            remaining_time_ms: Optional[int],
    ) -> Dict[str, Any]:
        if route.warm_up and self.settings.WARM_UP_ENABLED:
            await self.database.warm_up(self._warm_up_timeout(remaining_time_ms))

        try:
            try:
                return await self._execute(route, event)
            except Exception as e:
                if not is_connection_error(e):
                    raise
                # 웜 프로세스에서 연결이 끊긴 경우: 재연결 후 한 번만 다시 실행
                logger.warning("DB 연결 끊김 감지, 재연결 시도: %s %s - %r", route.method, route.resource, e)
                await self.database.reconnect()
                return await self._execute(route, event)
        except ApiError as e:
            status_code = status_for(e)
            if status_code >= 500 and not isinstance(e, DatabaseUnavailableError):
                logger.exception("처리 중 오류: %s %s", route.method, route.resource)
                return build_response(INTERNAL_ERROR_PAYLOAD, 500, self.settings)
            logger.info("요청 거부 (%d): %s %s - %s", status_code, route.method, route.resource, e.message)
            return build_response(e.to_payload(), status_code, self.settings)
        except Exception:
            logger.exception("예상하지 못한 오류: %s %s", route.method, route.resource)
            return build_response(INTERNAL_ERROR_PAYLOAD, 500, self.settings)

    async def _execute(self, route: Route, event: Dict[str, Any]) -> Dict[str, Any]:
        """Authorize → Parse → Validate → Execute → Finalize"""
        await self.database.ensure_connected()
        async with self.database.session() as session:
            identity, token = await self.gate.check(
                event.get("headers"), session, route.authorize
            )
            ctx = RequestContext(
                settings=self.settings,
                session=session,
                database=self.database,
                token_service=self.token_service,
                identity=identity,
                token=token,
                body=parse_body(event),
                path_params=event.get("pathParameters") or {},
                query_params=event.get("queryStringParameters") or {},
            )
            if route.schema is not None:
                context = await route.constraints(ctx) if route.constraints else {}
                ctx.data = validate_body(route.schema, ctx.body, context)
            result = await route.handler(ctx)

        # 핸들러가 identity를 비우면(로그아웃) 토큰을 돌려주지 않음
        refreshed = self._token_for_response(result.status_code, ctx.identity, ctx.token)
        return build_response(result.payload, result.status_code, self.settings, refreshed)

    def _warm_up_timeout(self, remaining_time_ms: Optional[int]) -> float:
        """남은 실행 시간에서 안전 여유를 뺀 깨우기 제한 시간(초)"""
        if remaining_time_ms is None:
            return self.settings.WARM_UP_DEFAULT_TIMEOUT_SECONDS
        return remaining_time_ms / 1000 - self.settings.WARM_UP_SAFETY_MARGIN_SECONDS

    def _housekeeping_timeout(self, remaining_time_ms: Optional[int]) -> float:
        """정리 작업 제한 시간(초): 설정값과 남은 실행 시간 중 작은 쪽"""
        timeout = self.settings.HOUSEKEEPING_TIMEOUT_SECONDS
        if remaining_time_ms is None:
            return timeout
        return min(timeout, remaining_time_ms / 1000 - self.settings.WARM_UP_SAFETY_MARGIN_SECONDS)

    def _token_for_response(
            self,
            status_code: int,
            identity: Optional[Identity],
            token: Optional[str],
    ) -> Optional[str]:
        """
        성공(2xx) 응답이고 인증된 요청이면
        - 소프트 갱신 기간이 지난 토큰은 새로 발급, 아니면 받은 토큰을 그대로 반환
        """
        if identity is None or not 200 <= status_code < 300:
            return None
        if self.token_service.needs_refresh(identity):
            logger.debug("토큰 재발급: username=%s", identity.username)
            return self.token_service.refresh(identity)
        return token

    async def maybe_housekeep(self, remaining_time_ms: Optional[int] = None) -> None:
        """
        일정 확률로 만료된 무효화 토큰 정리
        - 서버리스에서는 응답 반환 전에 실행되므로 짧은 제한 시간 안에서만 수행
        - 남은 실행 시간이 안전 여유보다 적으면 건너뜀
        - 실패해도 로그만 남기고 요청 결과에는 영향 없음
        """
        if self._sampler() >= self.settings.HOUSEKEEPING_SAMPLE_RATE:
            return
        timeout = self._housekeeping_timeout(remaining_time_ms)
        if timeout <= 0:
            logger.info("남은 실행 시간이 부족하여 정리 작업을 건너뜀")
            return
        try:
            await asyncio.wait_for(self.housekeeping(), timeout=timeout)
        except Exception as e:
            logger.warning("정리 작업 실패 (요청 결과에는 영향 없음): %r", e)

    async def housekeeping(self) -> int:
        """만료 시각이 지난 무효화 토큰 기록 삭제"""
        async with self.database.session() as session:
            repo = TokenRepository(session)
            async with repo.transaction("만료 토큰 정리"):
                pruned = await repo.prune_expired(utcnow())
        if pruned:
            logger.info("만료 토큰 정리: %d건", pruned)
        return pruned
