import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from app.repositories.follow_repository import FollowRepository
from app.schemas.follow_schema import FollowResponse

logger = logging.getLogger(__name__)


class FollowService:
    """
    팔로우 관계 서비스
    - 팔로우는 조건부 INSERT (중복 요청에도 엣지는 하나)
    - 언팔로우는 무조건 DELETE (없으면 아무 일도 없음)
    """
    def __init__(self, db: AsyncSession):
        self.db = db
        self.follow_repo = FollowRepository(db)

    async def follow(self, viewer: str, target: str) -> FollowResponse:
        async with self.follow_repo.transaction("팔로우"):
            inserted = await self.follow_repo.add_if_absent(viewer, target)
        if inserted:
            logger.info(f"팔로우: {viewer} → {target}")

        edge = await self.follow_repo.get(viewer, target)
        if edge is None:
            return FollowResponse(username=viewer, following=target)
        return FollowResponse.model_validate(edge)

    async def unfollow(self, viewer: str, target: str) -> FollowResponse:
        async with self.follow_repo.transaction("언팔로우"):
            await self.follow_repo.remove(viewer, target)
        logger.info(f"언팔로우: {viewer} → {target}")
        return FollowResponse(username=viewer, following=target)

    async def list_followings(self, viewer: str) -> List[FollowResponse]:
        """조회자가 팔로우 중인 엣지 목록"""
        edges = await self.follow_repo.list_followings(viewer)
        return [FollowResponse.model_validate(edge) for edge in edges]
