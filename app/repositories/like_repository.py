import logging

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError

from app.models.post_like import PostLike
from app.repositories.base_repository import BaseRepository
from app.repositories.exceptions import RepositoryError

logger = logging.getLogger(__name__)


class LikeRepository(BaseRepository):
    """
    좋아요(PostLike) 엣지 데이터 액세스 객체
    """

    async def add_if_absent(self, username: str, post_id: int) -> bool:
        """
        좋아요 엣지를 조건부로 추가
        Returns:
            bool: 새 행이 추가되었으면 True, 이미 있었으면 False
        """
        try:
            stmt = self.insert_ignore(PostLike).values(username=username, post_id=post_id)
            result = await self.session.execute(stmt)
            inserted = result.rowcount == 1
            logger.debug(f"좋아요 추가: username={username}, post_id={post_id}, inserted={inserted}")
            return inserted
        except SQLAlchemyError as e:
            logger.error(f"좋아요 추가 실패: {e}")
            raise RepositoryError(f"좋아요 추가 중 오류: {e}")

    async def remove(self, username: str, post_id: int) -> None:
        """좋아요 엣지 삭제 (없으면 아무 것도 하지 않음)"""
        try:
            await self.session.execute(
                delete(PostLike).where(
                    PostLike.username == username,
                    PostLike.post_id == post_id,
                )
            )
        except SQLAlchemyError as e:
            logger.error(f"좋아요 삭제 실패: {e}")
            raise RepositoryError(f"좋아요 삭제 중 오류: {e}")

    async def remove_all_for_post(self, post_id: int) -> None:
        """특정 게시글의 좋아요 전체 삭제"""
        try:
            await self.session.execute(delete(PostLike).where(PostLike.post_id == post_id))
        except SQLAlchemyError as e:
            logger.error(f"게시글 좋아요 일괄 삭제 실패 (post_id={post_id}): {e}")
            raise RepositoryError(f"게시글 좋아요 일괄 삭제 중 오류: {e}")
