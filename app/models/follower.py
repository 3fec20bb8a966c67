from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from app.core.database import Base
from app.utils.time_utils import utcnow


class Follower(Base):
    """
    팔로우 관계(엣지) 모델
    - username이 following을 팔로우함 (방향성 있음)
    - (username, following) 쌍은 유일
    """
    __tablename__ = "followers"
    __table_args__ = (
        UniqueConstraint("username", "following", name="uq_followers_pair"),
    )

    id: int = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        doc="팔로우 기록 고유 ID"
    )
    username: str = Column(
        String(120),
        ForeignKey("users.username"),
        nullable=False,
        doc="팔로우하는 사용자"
    )
    following: str = Column(
        String(120),
        ForeignKey("users.username"),
        nullable=False,
        doc="팔로우 대상 사용자"
    )
    created_at = Column(
        DateTime,
        nullable=False,
        default=utcnow,
        doc="팔로우 시각(UTC)"
    )
