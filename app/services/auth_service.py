import asyncio
import logging
from typing import Optional, Tuple

from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import Database
from app.jwt.token_service import Identity, TokenService
from app.models.user import User
from app.repositories.exceptions import RepositoryError
from app.repositories.token_repository import TokenRepository
from app.repositories.user_repository import UserRepository
from app.repositories.vocabulary_repository import VocabularyRepository
from app.schemas.auth_schema import (
    IdentityResponse, LoginResponse, MessageResponse, RegisterResponse
)
from app.utils.exceptions import BadCredentialsError, ConflictError

logger = logging.getLogger(__name__)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# 사용자명 충돌 시 가입 재시도 횟수
REGISTER_MAX_ATTEMPTS = 3


def _upper_first(word: str) -> str:
    """첫 글자만 대문자로 ('quiet' → 'Quiet')"""
    return word[:1].upper() + word[1:]


class AuthService:
    """
    인증 관련 서비스 클래스
    - 가입(무작위 계정 발급), 로그인, 로그아웃,
    - 현재 사용자 조회 기능 제공
    """
    def __init__(
        self,
        db: AsyncSession,
        token_service: TokenService,
        database: Optional[Database] = None,
    ):
        self.db = db
        self.token_service = token_service
        self.database = database
        self.user_repo = UserRepository(db)
        self.token_repo = TokenRepository(db)

    async def _random_name_pair(self) -> Optional[Tuple[str, str]]:
        async with self.database.session() as session:
            return await VocabularyRepository(session).random_unused_name_pair()

    async def _random_password_words(self) -> Optional[Tuple[str, str]]:
        async with self.database.session() as session:
            return await VocabularyRepository(session).random_password_words()

    async def register(self) -> RegisterResponse:
        """
        무작위 계정 발급
        1) 미사용 (이름, 성) 조합과 (형용사, 명사) 조합을 별도 세션에서 동시에 조회
        2) 사용자명 = '이름.성' 소문자, 비밀번호 = 'Adjective' + 'Noun'
        3) 저장 후 토큰 발급 (사용자명 충돌 시 재시도)
        Raises:
            ConflictError: 남은 이름 조합이 없거나 재시도를 모두 소진했을 때
        """
        for attempt in range(1, REGISTER_MAX_ATTEMPTS + 1):
            names, words = await asyncio.gather(
                self._random_name_pair(),
                self._random_password_words(),
            )
            if names is None:
                raise ConflictError("가입 가능한 이름 조합이 남아 있지 않습니다.")
            if words is None:
                raise RepositoryError("비밀번호 단어 목록이 비어 있습니다.")

            first_name, last_name = names
            password = _upper_first(words[0]) + _upper_first(words[1])
            user = User(
                username=f"{first_name}.{last_name}".lower(),
                first_name=first_name,
                last_name=last_name,
                password=pwd_context.hash(password),
            )
            try:
                async with self.user_repo.transaction("가입"):
                    await self.user_repo.create_user(user)
            except IntegrityError:
                logger.warning(f"사용자명 충돌 ({attempt}/{REGISTER_MAX_ATTEMPTS}): {user.username}")
                continue

            logger.info(f"가입 완료: username={user.username}")
            return RegisterResponse(
                username=user.username,
                first_name=first_name,
                last_name=last_name,
                password=password,
                token=self.token_service.issue(user),
            )

        raise ConflictError("가입 처리 중 사용자명 충돌이 반복되었습니다.")

    async def login(self, username: str, password: str) -> LoginResponse:
        """
        사용자명/비밀번호 로그인
        - 사용자 없음과 비밀번호 불일치는 같은 오류로 응답
        """
        user = await self.user_repo.find_by_username(username)
        if not user or not pwd_context.verify(password, user.password):
            logger.info(f"로그인 실패: username={username}")
            raise BadCredentialsError()

        return LoginResponse(
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name,
            token=self.token_service.issue(user),
        )

    async def logout(self, identity: Identity) -> MessageResponse:
        """
        로그아웃 + 토큰 무효화 등록
        - 원래 만료 시각까지 jti를 보관하고 이후 정리 작업에서 삭제
        """
        expires_at = self.token_service.expires_at(identity).replace(tzinfo=None)
        async with self.token_repo.transaction("로그아웃"):
            await self.token_repo.revoke(identity.jti, identity.username, expires_at)
        logger.info(f"로그아웃: username={identity.username}")
        return MessageResponse(message="로그아웃 되었습니다.")

    @staticmethod
    def current_user(identity: Identity) -> IdentityResponse:
        """현재 토큰의 사용자 정보"""
        return IdentityResponse(**identity.public())
