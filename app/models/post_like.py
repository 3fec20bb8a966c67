from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from app.core.database import Base
from app.utils.time_utils import utcnow


class PostLike(Base):
    """
    좋아요(PostLike) 모델
    - 사용자가 특정 게시글(Post)에 좋아요를 표시한 기록 저장
    - (username, post_id) 쌍은 유일
    """
    __tablename__ = "post_likes"
    __table_args__ = (
        UniqueConstraint("username", "post_id", name="uq_post_likes_pair"),
    )

    id: int = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        doc="좋아요 기록 고유 ID"
    )
    username: str = Column(
        String(120),
        ForeignKey("users.username"),
        nullable=False,
        doc="좋아요를 누른 사용자"
    )
    post_id: int = Column(
        Integer,
        ForeignKey("posts.id"),
        nullable=False,
        index=True,
        doc="좋아요 대상 게시글 ID"
    )
    created_at = Column(
        DateTime,
        nullable=False,
        default=utcnow,
        doc="좋아요 시각(UTC)"
    )
