import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.repositories.user_repository import UserRepository
from app.schemas.user_schema import UserResponse
from app.utils.exceptions import BadRequestError, NotFoundError

logger = logging.getLogger(__name__)


class UserService:
    """
    사용자 조회 서비스
    - 게시글 수 랭킹 목록, 단일 프로필
    """
    def __init__(self, db: AsyncSession, settings: Settings):
        self.db = db
        self.settings = settings
        self.user_repo = UserRepository(db)

    async def get_users(
            self,
            users_before: Optional[str] = None,
            offset: Optional[int] = None,
    ) -> List[UserResponse]:
        """
        게시글 수 내림차순, 사용자명 오름차순 랭킹
        - users_before: 마지막으로 본 사용자명, 그 사용자의 랭킹 위치 다음부터 조회
        - offset: 커서 대신 건너뛸 행 수
        Raises:
            BadRequestError: 커서 사용자가 없거나 offset이 음수일 때
        """
        if offset is not None and offset < 0:
            raise BadRequestError("offset 값은 0 이상이어야 합니다.")

        after = None
        if users_before:
            after = await self.user_repo.find_by_username(users_before)
            if after is None:
                raise BadRequestError("users_before 사용자를 찾을 수 없습니다.")

        users = await self.user_repo.list_ranked(
            limit=self.settings.USERS_PAGE_SIZE,
            after=after,
            offset=offset or 0,
        )
        return [UserResponse.model_validate(u) for u in users]

    async def get_user(self, username: str) -> UserResponse:
        user = await self.user_repo.find_by_username(username)
        if not user:
            raise NotFoundError("사용자를 찾을 수 없습니다.")
        return UserResponse.model_validate(user)
