from sqlalchemy import Column, Integer, String, DateTime
from app.core.database import Base
from app.utils.time_utils import utcnow


class User(Base):
    """
    서비스 사용자(User) 모델
    - 가입 시 무작위로 생성된 이름 조합으로 식별
    - posts는 게시글 생성/삭제 때마다 posts 테이블에서 다시 계산되는 캐시 값
    """
    __tablename__ = "users"

    username: str = Column(
        String(120),
        primary_key=True,
        doc="'이름.성' 형태의 소문자 사용자명"
    )
    first_name: str = Column(
        String(60),
        nullable=False,
        doc="이름"
    )
    last_name: str = Column(
        String(60),
        nullable=False,
        doc="성"
    )
    posts: int = Column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
        doc="작성한 게시글 수(비정규화 캐시)"
    )
    password: str = Column(
        String(255),
        nullable=False,
        doc="해시 처리된 비밀번호 (솔트 포함)"
    )
    created_at = Column(
        DateTime,
        nullable=False,
        default=utcnow,
        doc="가입 시각(UTC)"
    )
    updated_at = Column(
        DateTime,
        nullable=True,
        onupdate=utcnow,
        doc="마지막 수정 시각(UTC)"
    )
