"""
피드/타임라인 조립 서비스

- 사용자 게시글: 특정 작성자의 게시글, (created_at ASC, id ASC)
- 타임라인: 조회자 본인 + 팔로우 중인 사용자의 게시글, (created_at DESC, id DESC)
- 두 목록 모두 posts_before(id) 커서로 이어보기, 조회자 기준 is_liked 포함
"""

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.repositories.post_repository import PostRepository
from app.repositories.user_repository import UserRepository
from app.schemas.post_schema import PostResponse
from app.services.post_service import to_post_response
from app.utils.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class FeedService:
    def __init__(self, db: AsyncSession, settings: Settings):
        self.db = db
        self.settings = settings
        self.post_repo = PostRepository(db)
        self.user_repo = UserRepository(db)

    async def get_user_posts(
            self,
            viewer: Optional[str],
            owner: str,
            posts_before: Optional[int] = None,
    ) -> List[PostResponse]:
        """
        작성자의 게시글 목록
        - 비로그인 조회 가능 (is_liked는 false)
        Raises:
            NotFoundError: 작성자가 존재하지 않을 때
        """
        if not await self.user_repo.find_by_username(owner):
            raise NotFoundError("사용자를 찾을 수 없습니다.")

        rows = await self.post_repo.list_user_posts(
            viewer,
            owner,
            limit=self.settings.USER_POSTS_PAGE_SIZE,
            posts_before=posts_before,
        )
        return [to_post_response(post, is_liked) for post, is_liked in rows]

    async def get_timeline(
            self,
            viewer: str,
            posts_before: Optional[int] = None,
    ) -> List[PostResponse]:
        """조회자 타임라인 (최신 순)"""
        rows = await self.post_repo.list_timeline(
            viewer,
            limit=self.settings.TIMELINE_PAGE_SIZE,
            posts_before=posts_before,
        )
        logger.debug(f"타임라인 조립: viewer={viewer}, posts_before={posts_before}, count={len(rows)}")
        return [to_post_response(post, is_liked) for post, is_liked in rows]
