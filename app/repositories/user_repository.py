import logging
from typing import Iterable, List, Optional, Set

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.models.user import User
from app.repositories.base_repository import BaseRepository
from app.repositories.exceptions import RepositoryError

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository):
    """
    사용자 관련 데이터 액세스 담당 Repository 클래스
    - User 엔티티 조회/생성 및 게시글 수 기준 랭킹 조회
    """

    async def find_by_username(self, username: str) -> Optional[User]:
        """
        주어진 사용자명과 일치하는 User 객체 반환
        """
        try:
            query = select(User).where(User.username == username)
            result = await self.session.execute(query)
            return result.scalars().first()
        except SQLAlchemyError as e:
            logger.error(f"사용자 조회 실패 (username={username}): {e}")
            raise RepositoryError(f"사용자 조회 중 오류: {e}")

    async def existing_usernames(self, usernames: Iterable[str]) -> Set[str]:
        """
        주어진 후보 중 실제로 존재하는 사용자명 집합 반환
        """
        candidates = [u for u in usernames if isinstance(u, str)]
        if not candidates:
            return set()
        try:
            query = select(User.username).where(User.username.in_(candidates))
            result = await self.session.execute(query)
            return set(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"사용자명 존재 확인 실패: {e}")
            raise RepositoryError(f"사용자명 존재 확인 중 오류: {e}")

    async def create_user(self, user: User) -> None:
        """
        새 User 엔티티를 세션에 추가하고 flush
        - 사용자명 중복 시 IntegrityError를 그대로 전파 (호출 측에서 재시도)
        """
        self.session.add(user)
        try:
            await self.session.flush()
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"사용자 생성 실패: {e}")
            raise RepositoryError(f"사용자 생성 중 오류: {e}")

    async def list_ranked(
            self,
            limit: int,
            after: Optional[User] = None,
            offset: int = 0,
    ) -> List[User]:
        """
        게시글 수 내림차순, 사용자명 오름차순 랭킹 조회
        - after: 이 사용자의 랭킹 위치 다음부터 조회 (이어보기 커서)
        - offset: 커서 대신 사용할 수 있는 건너뛸 행 수
        """
        if limit <= 0:
            raise ValueError("limit은 0보다 큰 값이어야 합니다.")
        query = select(User)
        if after is not None:
            query = query.where(
                or_(
                    User.posts < after.posts,
                    and_(
                        User.posts == after.posts,
                        User.username > after.username,
                    )
                )
            )
        query = query.order_by(User.posts.desc(), User.username.asc()).offset(offset).limit(limit)
        try:
            result = await self.session.execute(query)
            users = list(result.scalars().all())
            logger.debug(f"사용자 랭킹 조회: limit={limit}, offset={offset}, found={len(users)}")
            return users
        except SQLAlchemyError as e:
            logger.error(f"사용자 랭킹 조회 실패: {e}")
            raise RepositoryError(f"사용자 랭킹 조회 중 오류: {e}")
