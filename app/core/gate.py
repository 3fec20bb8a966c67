import logging
from typing import Mapping, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.jwt.token_service import Identity, TokenService
from app.repositories.token_repository import TokenRepository
from app.utils.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)


def extract_bearer_token(headers: Optional[Mapping[str, str]]) -> Optional[str]:
    """
    Authorization 헤더에서 Bearer 토큰 추출
    - 게이트웨이는 헤더 대소문자를 보존하므로 이름 비교는 대소문자 무시
    """
    if not headers:
        return None
    for name, value in headers.items():
        if name.lower() != "authorization" or not value:
            continue
        scheme, _, token = value.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()
    return None


class AuthorizationGate:
    """
    요청 단위 인증 게이트
    - 모든 경로에서 토큰 해석을 시도 (실패해도 익명으로 진행)
    - authorize=True 경로에서 해석 실패 시 UnauthorizedError로 파이프라인 중단
    """
    def __init__(self, token_service: TokenService):
        self.token_service = token_service

    async def resolve(
            self,
            headers: Optional[Mapping[str, str]],
            session: AsyncSession,
    ) -> Tuple[Optional[Identity], Optional[str]]:
        """
        헤더의 토큰을 검증하여 (Identity, 원본 토큰) 반환
        - 토큰 없음/서명 오류/만료/로그아웃된 토큰이면 (None, None)
        """
        token = extract_bearer_token(headers)
        if not token:
            return None, None

        identity = self.token_service.verify(token)
        if identity is None:
            return None, None

        if await TokenRepository(session).is_revoked(identity.jti):
            logger.info("무효화된 토큰 사용: username=%s", identity.username)
            return None, None
        return identity, token

    async def check(
            self,
            headers: Optional[Mapping[str, str]],
            session: AsyncSession,
            authorize: bool,
    ) -> Tuple[Optional[Identity], Optional[str]]:
        """경로의 인증 요구 여부에 따라 통과 또는 UnauthorizedError"""
        identity, token = await self.resolve(headers, session)
        if authorize and identity is None:
            raise UnauthorizedError("인증이 필요합니다.")
        return identity, token
