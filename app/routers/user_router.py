import logging
from typing import List

from app.core.config import Settings
from app.core.context import HandlerResult, RequestContext
from app.core.router import Route
from app.core.validation import follow_target
from app.schemas.follow_schema import FollowRequest, UnfollowRequest
from app.services.feed_service import FeedService
from app.services.follow_service import FollowService
from app.services.user_service import UserService

logger = logging.getLogger(__name__)


async def get_users(ctx: RequestContext) -> HandlerResult:
    """
    게시글 수 랭킹 목록
    - users_before: 마지막으로 본 사용자명 (이어보기)
    - offset: 커서 대신 건너뛸 행 수
    """
    users = await UserService(ctx.session, ctx.settings).get_users(
        users_before=ctx.query_params.get("users_before"),
        offset=ctx.query_int("offset"),
    )
    return HandlerResult(users)


async def get_user(ctx: RequestContext) -> HandlerResult:
    """단일 사용자 프로필"""
    user = await UserService(ctx.session, ctx.settings).get_user(ctx.path_params.get("username", ""))
    return HandlerResult(user)


async def get_user_posts(ctx: RequestContext) -> HandlerResult:
    """
    사용자 게시글 목록 (로그인 시 조회자 기준 좋아요 여부 포함)
    """
    posts = await FeedService(ctx.session, ctx.settings).get_user_posts(
        ctx.viewer,
        ctx.path_params.get("username", ""),
        posts_before=ctx.query_int("posts_before"),
    )
    return HandlerResult(posts)


async def follow(ctx: RequestContext) -> HandlerResult:
    edge = await FollowService(ctx.session).follow(ctx.viewer, ctx.data.follow)
    return HandlerResult(edge)


async def unfollow(ctx: RequestContext) -> HandlerResult:
    edge = await FollowService(ctx.session).unfollow(ctx.viewer, ctx.data.follow)
    return HandlerResult(edge)


async def list_followings(ctx: RequestContext) -> HandlerResult:
    """현재 사용자가 팔로우 중인 엣지 목록"""
    return HandlerResult(await FollowService(ctx.session).list_followings(ctx.viewer))


def get_routes(settings: Settings) -> List[Route]:
    return [
        Route("/users", "GET", get_users, warm_up=True),
        Route("/users/{username}", "GET", get_user),
        Route("/users/{username}/posts", "GET", get_user_posts),
        Route("/follow", "POST", follow, authorize=True,
              schema=FollowRequest, constraints=follow_target),
        Route("/unfollow", "POST", unfollow, authorize=True, schema=UnfollowRequest),
        Route("/followings", "GET", list_followings, authorize=True),
    ]
