from sqlalchemy import Column, Integer, DateTime, String, ForeignKey, Index
from app.core.config import MESSAGE_COLUMN_LENGTH
from app.core.database import Base
from app.utils.time_utils import utcnow


class Post(Base):
    """
    게시글 모델
    - id는 서버가 부여하는 단조 증가 값이며 페이지 커서로 사용
    - likes는 좋아요 추가/취소 때마다 post_likes 테이블에서 다시 계산되는 캐시 값
    """
    __tablename__ = "posts"
    __table_args__ = (
        Index("idx_posts_username_created", "username", "created_at"),
        # 삭제된 id 재사용 방지
        {"sqlite_autoincrement": True},
    )

    id: int = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        doc="게시글 고유 ID"
    )
    username: str = Column(
        String(120),
        ForeignKey("users.username"),
        nullable=False,
        doc="작성자 사용자명"
    )
    message: str = Column(
        String(MESSAGE_COLUMN_LENGTH),
        nullable=False,
        doc="게시글 본문"
    )
    likes: int = Column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
        doc="좋아요 수(비정규화 캐시)"
    )
    created_at = Column(
        DateTime,
        nullable=False,
        default=utcnow,
        doc="작성 시각(UTC)"
    )
    updated_at = Column(
        DateTime,
        nullable=True,
        doc="마지막 수정 시각(UTC)"
    )
