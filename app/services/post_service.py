import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.post import Post
from app.repositories.like_repository import LikeRepository
from app.repositories.post_repository import PostRepository
from app.schemas.post_schema import PostResponse
from app.utils.exceptions import NotFoundError, UnauthorizedError

logger = logging.getLogger(__name__)


def to_post_response(post: Post, is_liked: bool) -> PostResponse:
    """Post 엔티티 + 조회자 좋아요 여부 → 응답 모델"""
    return PostResponse(
        id=post.id,
        username=post.username,
        message=post.message,
        likes=post.likes,
        created_at=post.created_at,
        updated_at=post.updated_at,
        is_liked=is_liked,
    )


class PostService:
    """
    게시글 쓰기 서비스
    - 작성, 삭제, 좋아요/좋아요 취소
    - 쓰기 후 비정규화 카운트(users.posts, posts.likes)는 같은 트랜잭션에서 다시 계산
    """
    def __init__(self, db: AsyncSession):
        self.db = db
        self.post_repo = PostRepository(db)
        self.like_repo = LikeRepository(db)

    async def _get_post_or_404(self, post_id: int) -> Post:
        post = await self.post_repo.get_by_id(post_id)
        if not post:
            raise NotFoundError("게시글을 찾을 수 없습니다.")
        return post

    async def create_post(self, viewer: str, message: str) -> PostResponse:
        """
        게시글 작성
        1) INSERT → 2) 작성자 게시글 수 재계산 → 3) 저장된 행 다시 읽기
        """
        async with self.post_repo.transaction("게시글 작성"):
            post = await self.post_repo.add(viewer, message)
            await self.post_repo.recompute_user_post_count(viewer)
            post = await self.post_repo.reload(post)
        logger.info(f"게시글 작성: id={post.id}, username={viewer}")
        return to_post_response(post, False)

    async def delete_post(self, viewer: str, post_id: int) -> None:
        """
        게시글 삭제
        - 작성자 확인은 어떤 쓰기보다 먼저 수행 (작성자가 아니면 UnauthorizedError)
        - 좋아요 → 게시글 순서로 삭제 후 작성자 게시글 수 재계산
        """
        post = await self._get_post_or_404(post_id)
        if post.username != viewer:
            logger.info(f"게시글 삭제 거부: id={post_id}, owner={post.username}, viewer={viewer}")
            raise UnauthorizedError("본인 게시글만 삭제할 수 있습니다.")

        async with self.post_repo.transaction("게시글 삭제"):
            await self.like_repo.remove_all_for_post(post_id)
            await self.post_repo.delete(post_id)
            await self.post_repo.recompute_user_post_count(viewer)
        logger.info(f"게시글 삭제: id={post_id}, username={viewer}")

    async def like(self, viewer: str, post_id: int) -> PostResponse:
        """
        좋아요
        - 조건부 INSERT로 중복 요청에도 엣지는 하나만 존재
        - 새 행이 추가된 경우에만 좋아요 수 재계산
        """
        post = await self._get_post_or_404(post_id)
        async with self.like_repo.transaction("좋아요"):
            if await self.like_repo.add_if_absent(viewer, post_id):
                await self.post_repo.recompute_like_count(post_id)
            post = await self.post_repo.reload(post)
        return to_post_response(post, True)

    async def unlike(self, viewer: str, post_id: int) -> PostResponse:
        """좋아요 취소 (엣지가 없어도 카운트는 항상 재계산)"""
        post = await self._get_post_or_404(post_id)
        async with self.like_repo.transaction("좋아요 취소"):
            await self.like_repo.remove(viewer, post_id)
            await self.post_repo.recompute_like_count(post_id)
            post = await self.post_repo.reload(post)
        return to_post_response(post, False)
