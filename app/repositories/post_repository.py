import logging
from typing import List, Optional, Tuple

from sqlalchemy import and_, delete, false, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError

from app.models.follower import Follower
from app.models.post import Post
from app.models.post_like import PostLike
from app.models.user import User
from app.repositories.base_repository import BaseRepository
from app.repositories.exceptions import RepositoryError

logger = logging.getLogger(__name__)


# ==================== 쿼리 빌더 클래스 ====================
class FeedQueryBuilder:
    """게시글 피드 쿼리 빌더"""

    @staticmethod
    def with_like_state(viewer: Optional[str]):
        """
        게시글 + 조회자 기준 좋아요 여부를 함께 가져오는 기본 쿼리
        - 좋아요 테이블을 조회자로 한정해 LEFT JOIN 하므로 is_liked는 조회자별 값
        - 비로그인 조회는 항상 false
        """
        if viewer is None:
            return select(Post, false().label("is_liked"))
        return (
            select(Post, PostLike.id.is_not(None).label("is_liked"))
            .outerjoin(
                PostLike,
                and_(PostLike.post_id == Post.id, PostLike.username == viewer),
            )
        )

    @staticmethod
    def build_user_posts_query(viewer: Optional[str], owner: str, posts_before: Optional[int]):
        """특정 사용자의 게시글 (오래된 순)"""
        query = FeedQueryBuilder.with_like_state(viewer).where(Post.username == owner)
        if posts_before is not None:
            query = query.where(Post.id < posts_before)
        return query.order_by(Post.created_at.asc(), Post.id.asc())

    @staticmethod
    def build_timeline_query(viewer: str, posts_before: Optional[int]):
        """
        조회자 본인 + 팔로우 중인 사용자의 게시글 (최신 순)
        - 정렬 키: (created_at DESC, id DESC)
        """
        followings = select(Follower.following).where(Follower.username == viewer)
        query = FeedQueryBuilder.with_like_state(viewer).where(
            or_(Post.username == viewer, Post.username.in_(followings))
        )
        if posts_before is not None:
            query = query.where(Post.id < posts_before)
        return query.order_by(Post.created_at.desc(), Post.id.desc())


class PostRepository(BaseRepository):
    """
    비동기 게시글 데이터 액세스 객체
    - Post 엔티티의 저장, 조회, 삭제 및 비정규화 카운트 재계산 담당
    """

    async def get_by_id(self, post_id: int) -> Optional[Post]:
        """id로 Post 조회"""
        try:
            result = await self.session.execute(select(Post).where(Post.id == post_id))
            post = result.scalars().first()
            logger.debug(f"Post 조회: id={post_id}, found={bool(post)}")
            return post
        except SQLAlchemyError as e:
            logger.error(f"Post 조회 실패 (id={post_id}): {e}")
            raise RepositoryError(f"Post 조회 중 오류: {e}")

    async def list_user_posts(
            self,
            viewer: Optional[str],
            owner: str,
            limit: int,
            posts_before: Optional[int] = None,
    ) -> List[Tuple[Post, bool]]:
        """
        사용자 게시글 목록과 조회자 기준 좋아요 여부 반환

        Args:
            viewer: 조회자 사용자명 (비로그인 시 None)
            owner: 게시글 작성자
            limit: 페이지 크기
            posts_before: 이 id보다 작은 게시글만 조회

        Returns:
            List[Tuple[Post, bool]]: (게시글, is_liked) 목록
        """
        if limit <= 0:
            raise ValueError("limit은 0보다 큰 값이어야 합니다.")
        try:
            query = FeedQueryBuilder.build_user_posts_query(viewer, owner, posts_before).limit(limit)
            rows = (await self.session.execute(query)).all()
            logger.debug(f"사용자 게시글 조회: owner={owner}, viewer={viewer}, found={len(rows)}")
            return [(post, bool(is_liked)) for post, is_liked in rows]
        except SQLAlchemyError as e:
            logger.error(f"사용자 게시글 조회 실패: {e}")
            raise RepositoryError(f"사용자 게시글 조회 중 오류: {e}")

    async def list_timeline(
            self,
            viewer: str,
            limit: int,
            posts_before: Optional[int] = None,
    ) -> List[Tuple[Post, bool]]:
        """조회자 타임라인 (본인 + 팔로잉 게시글)과 좋아요 여부 반환"""
        if limit <= 0:
            raise ValueError("limit은 0보다 큰 값이어야 합니다.")
        try:
            query = FeedQueryBuilder.build_timeline_query(viewer, posts_before).limit(limit)
            rows = (await self.session.execute(query)).all()
            logger.debug(f"타임라인 조회: viewer={viewer}, found={len(rows)}")
            return [(post, bool(is_liked)) for post, is_liked in rows]
        except SQLAlchemyError as e:
            logger.error(f"타임라인 조회 실패: {e}")
            raise RepositoryError(f"타임라인 조회 중 오류: {e}")

    async def add(self, username: str, message: str) -> Post:
        """새 Post를 세션에 추가하고 id를 발급받기 위해 flush"""
        try:
            post = Post(username=username, message=message)
            self.session.add(post)
            await self.session.flush()
            logger.debug(f"Post 추가: id={post.id}, username={username}")
            return post
        except SQLAlchemyError as e:
            logger.error(f"Post 추가 실패: {e}")
            raise RepositoryError(f"Post 추가 중 오류: {e}")

    async def delete(self, post_id: int) -> None:
        """Post 삭제 (좋아요는 먼저 삭제되어 있어야 함)"""
        try:
            await self.session.execute(delete(Post).where(Post.id == post_id))
            logger.debug(f"Post 삭제: id={post_id}")
        except SQLAlchemyError as e:
            logger.error(f"Post 삭제 실패 (id={post_id}): {e}")
            raise RepositoryError(f"Post 삭제 중 오류: {e}")

    async def recompute_user_post_count(self, username: str) -> None:
        """users.posts를 posts 테이블 기준으로 다시 계산"""
        try:
            count = (
                select(func.count(Post.id))
                .where(Post.username == username)
                .scalar_subquery()
            )
            await self.session.execute(
                update(User)
                .where(User.username == username)
                .values(posts=count)
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            logger.error(f"게시글 수 재계산 실패 (username={username}): {e}")
            raise RepositoryError(f"게시글 수 재계산 중 오류: {e}")

    async def recompute_like_count(self, post_id: int) -> None:
        """posts.likes를 post_likes 테이블 기준으로 다시 계산"""
        try:
            count = (
                select(func.count(PostLike.id))
                .where(PostLike.post_id == post_id)
                .scalar_subquery()
            )
            await self.session.execute(
                update(Post)
                .where(Post.id == post_id)
                .values(likes=count)
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            logger.error(f"좋아요 수 재계산 실패 (post_id={post_id}): {e}")
            raise RepositoryError(f"좋아요 수 재계산 중 오류: {e}")

    async def reload(self, post: Post) -> Post:
        """Core UPDATE로 바뀐 컬럼을 반영하도록 다시 읽기"""
        await self.session.refresh(post)
        return post
