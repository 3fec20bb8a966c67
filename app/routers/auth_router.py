import logging
from typing import List

from app.core.config import Settings
from app.core.context import HandlerResult, RequestContext
from app.core.router import Route
from app.core.validation import validate_body
from app.schemas.auth_schema import LoginRequest
from app.services.auth_service import AuthService
from app.utils.exceptions import BadCredentialsError, ValidationFailedError

# 로거 설정
logger = logging.getLogger(__name__)


async def register(ctx: RequestContext) -> HandlerResult:
    """
    무작위 이름/비밀번호로 새 계정을 만들고 토큰 발급
    """
    service = AuthService(ctx.session, ctx.token_service, ctx.database)
    return HandlerResult(await service.register())


async def login(ctx: RequestContext) -> HandlerResult:
    """
    사용자명/비밀번호 로그인
    - 본문 형식 오류도 자격 증명 오류와 같은 응답 (어느 쪽이 틀렸는지 노출하지 않음)
    """
    try:
        req = validate_body(LoginRequest, ctx.body)
    except ValidationFailedError:
        raise BadCredentialsError()
    service = AuthService(ctx.session, ctx.token_service)
    return HandlerResult(await service.login(req.username, req.password))


async def logout(ctx: RequestContext) -> HandlerResult:
    """
    현재 토큰을 무효화 목록에 등록
    """
    result = await AuthService(ctx.session, ctx.token_service).logout(ctx.identity)
    # 무효화된 토큰은 응답 헤더로 돌려주지 않음
    ctx.identity = None
    ctx.token = None
    return HandlerResult(result)


async def current_user(ctx: RequestContext) -> HandlerResult:
    """현재 토큰의 사용자 정보"""
    return HandlerResult(AuthService.current_user(ctx.identity))


def get_routes(settings: Settings) -> List[Route]:
    return [
        Route("/register", "POST", register, warm_up=True),
        Route("/login", "POST", login, warm_up=True),
        Route("/logout", "POST", logout, authorize=True),
        Route("/user", "GET", current_user, authorize=True),
    ]
