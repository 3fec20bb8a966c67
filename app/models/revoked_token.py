from sqlalchemy import Column, String, DateTime
from app.core.database import Base


class RevokedToken(Base):
    """
    로그아웃으로 무효화된 토큰 기록
    - jti 기준으로 인증 게이트에서 거부
    - expires_at이 지난 행은 정리 작업(housekeeping)에서 삭제
    """
    __tablename__ = "revoked_tokens"

    jti: str = Column(
        String(64),
        primary_key=True,
        doc="토큰 식별자(JWT ID)"
    )
    username: str = Column(
        String(120),
        nullable=False,
        doc="토큰 소유자"
    )
    expires_at = Column(
        DateTime,
        nullable=False,
        index=True,
        doc="원래 토큰의 만료 시각(UTC)"
    )
