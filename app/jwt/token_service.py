"""
토큰 서비스 모듈

서명된 무상태(stateless) 토큰 발급/검증
- 토큰에는 사용자명, 이름, 성, 발급 시각(iat)이 담김
- 발급 후 TOKEN_HARD_EXPIRES_HOURS가 지나면 무조건 만료
- TOKEN_SOFT_REFRESH_MINUTES가 지난 유효 토큰은 응답 시 새 토큰으로 교체 (슬라이딩 세션)
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError

from app.core.config import Settings

logger = logging.getLogger(__name__)


class Identity(BaseModel):
    """
    검증된 토큰에서 얻은 요청 주체
    - issued_at: 토큰 발급 시각(UTC)
    - jti: 토큰 식별자 (로그아웃 무효화에 사용)
    """
    username: str
    first_name: str
    last_name: str
    issued_at: datetime
    jti: str

    def public(self) -> dict:
        """응답에 노출할 사용자 정보"""
        return {
            "username": self.username,
            "first_name": self.first_name,
            "last_name": self.last_name,
        }


def _now(now: Optional[datetime]) -> datetime:
    return now or datetime.now(timezone.utc)


class TokenService:
    """
    토큰 발급/검증 서비스
    - 비밀 키와 유효 기간은 주입된 Settings에서 읽음 (부수 효과 없음)
    """
    def __init__(self, settings: Settings):
        self._secret_key = settings.JWT_SECRET_KEY
        self._algorithm = settings.JWT_ALGORITHM
        self.hard_window = timedelta(hours=settings.TOKEN_HARD_EXPIRES_HOURS)
        self.soft_window = timedelta(minutes=settings.TOKEN_SOFT_REFRESH_MINUTES)

    def issue(self, subject, now: Optional[datetime] = None) -> str:
        """
        사용자 정보로 새 토큰 발급
        - subject: username, first_name, last_name 속성을 가진 객체 (User 또는 Identity)
        """
        issued_at = _now(now)
        payload = {
            "sub": subject.username,
            "first_name": subject.first_name,
            "last_name": subject.last_name,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.hard_window).timestamp()),
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str, now: Optional[datetime] = None) -> Optional[Identity]:
        """
        토큰을 검증하여 Identity 반환
        - 서명 오류, 형식 오류, 하드 만료 시 None (예외를 던지지 않음)
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"verify_exp": False},
            )
            identity = Identity(
                username=payload["sub"],
                first_name=payload["first_name"],
                last_name=payload["last_name"],
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                jti=payload["jti"],
            )
            expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
        except (JWTError, KeyError, TypeError, ValueError, ValidationError) as e:
            logger.info("유효하지 않은 토큰: %s", e)
            return None

        current = _now(now)
        if current >= expires_at or current - identity.issued_at > self.hard_window:
            logger.info("만료된 토큰: username=%s", identity.username)
            return None
        return identity

    def needs_refresh(self, identity: Identity, now: Optional[datetime] = None) -> bool:
        """소프트 갱신 기간이 지났는지 여부"""
        return _now(now) - identity.issued_at > self.soft_window

    def refresh(self, identity: Identity, now: Optional[datetime] = None) -> str:
        """같은 사용자로 새 발급 시각의 토큰 재발급"""
        return self.issue(identity, now=now)

    def expires_at(self, identity: Identity) -> datetime:
        """토큰의 하드 만료 시각(UTC)"""
        return identity.issued_at + self.hard_window
