import logging
from typing import List

from app.core.config import Settings
from app.core.context import HandlerResult, RequestContext
from app.core.router import Route
from app.core.validation import message_allow_list
from app.schemas.post_schema import PostCreateRequest
from app.services.feed_service import FeedService
from app.services.post_service import PostService

logger = logging.getLogger(__name__)


async def get_timeline(ctx: RequestContext) -> HandlerResult:
    """
    본인 + 팔로잉 게시글 타임라인 (최신 순, posts_before 커서)
    """
    posts = await FeedService(ctx.session, ctx.settings).get_timeline(
        ctx.viewer,
        posts_before=ctx.query_int("posts_before"),
    )
    return HandlerResult(posts)


async def create_post(ctx: RequestContext) -> HandlerResult:
    post = await PostService(ctx.session).create_post(ctx.viewer, ctx.data.message)
    return HandlerResult(post)


async def delete_post(ctx: RequestContext) -> HandlerResult:
    """본인 게시글 삭제 (페이로드 없음)"""
    await PostService(ctx.session).delete_post(ctx.viewer, ctx.path_int("id"))
    return HandlerResult(None)


async def like_post(ctx: RequestContext) -> HandlerResult:
    post = await PostService(ctx.session).like(ctx.viewer, ctx.path_int("id"))
    return HandlerResult(post)


async def unlike_post(ctx: RequestContext) -> HandlerResult:
    post = await PostService(ctx.session).unlike(ctx.viewer, ctx.path_int("id"))
    return HandlerResult(post)


def get_routes(settings: Settings) -> List[Route]:
    routes = [
        Route("/timeline", "GET", get_timeline, authorize=True),
        Route("/posts", "POST", create_post, authorize=True,
              schema=PostCreateRequest, constraints=message_allow_list),
        Route("/posts/{id}", "DELETE", delete_post, authorize=True),
    ]
    if settings.LIKES_ENABLED:
        routes += [
            Route("/posts/{id}/likes", "POST", like_post, authorize=True),
            Route("/posts/{id}/likes", "DELETE", unlike_post, authorize=True),
        ]
    return routes
