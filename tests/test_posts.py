import asyncio

from sqlalchemy import func, select

from app.core.router import Dispatcher
from app.models.post import Post
from app.models.post_like import PostLike
from app.models.user import User
from app.routers.registry import build_routes
from tests.conftest import LINE_A, body_of, make_event, make_settings


async def _count(database, model, *where):
    async with database.session() as session:
        query = select(func.count()).select_from(model)
        if where:
            query = query.where(*where)
        return (await session.execute(query)).scalar_one()


async def _user(database, username):
    async with database.session() as session:
        return await session.get(User, username)


async def test_create_post_returns_post_and_updates_count(call, create_user, database):
    ada = await create_user("ada.lovelace")

    response = await call("/posts", "POST", body={"message": LINE_A}, token=ada)

    post = body_of(response)
    assert response["statusCode"] == 200
    assert post["message"] == LINE_A
    assert post["username"] == "ada.lovelace"
    assert post["likes"] == 0
    assert post["is_liked"] is False
    assert (await _user(database, "ada.lovelace")).posts == 1


async def test_message_outside_allow_list_is_rejected_without_write(call, create_user, database):
    ada = await create_user("ada.lovelace")

    response = await call("/posts", "POST", body={"message": "buy cheap watches"}, token=ada)

    assert response["statusCode"] == 400
    assert "message" in body_of(response)["errors"]
    assert await _count(database, Post) == 0


async def test_empty_or_missing_message_is_rejected(call, create_user):
    ada = await create_user("ada.lovelace")

    empty = await call("/posts", "POST", body={"message": ""}, token=ada)
    missing = await call("/posts", "POST", body={}, token=ada)

    assert empty["statusCode"] == 400
    assert missing["statusCode"] == 400


async def test_any_message_accepted_when_allow_list_disabled(tmp_path, database, token_service, create_user):
    settings = make_settings(tmp_path, MESSAGE_ALLOW_LIST_ENABLED=False)
    dispatcher = Dispatcher(settings, database, build_routes(settings), token_service=token_service)
    ada = await create_user("ada.lovelace")

    accepted = await dispatcher.dispatch(make_event("/posts", "POST", body={"message": "anything goes"}, token=ada))
    too_long = await dispatcher.dispatch(make_event("/posts", "POST", body={"message": "x" * 256}, token=ada))

    assert accepted["statusCode"] == 200
    assert too_long["statusCode"] == 400


async def test_message_limit_follows_configured_length(tmp_path, database, token_service, create_user):
    settings = make_settings(tmp_path, MESSAGE_ALLOW_LIST_ENABLED=False, MESSAGE_MAX_LENGTH=300)
    dispatcher = Dispatcher(settings, database, build_routes(settings), token_service=token_service)
    ada = await create_user("ada.lovelace")

    longer = await dispatcher.dispatch(make_event("/posts", "POST", body={"message": "x" * 280}, token=ada))
    too_long = await dispatcher.dispatch(make_event("/posts", "POST", body={"message": "x" * 301}, token=ada))

    assert longer["statusCode"] == 200
    assert body_of(longer)["message"] == "x" * 280
    assert too_long["statusCode"] == 400


async def test_delete_by_non_owner_is_unauthorized_and_changes_nothing(call, create_user, database):
    ada = await create_user("ada.lovelace")
    bob = await create_user("bob.stone")
    post = body_of(await call("/posts", "POST", body={"message": LINE_A}, token=ada))

    response = await call("/posts/{id}", "DELETE", path={"id": str(post["id"])}, token=bob)

    assert response["statusCode"] == 401
    assert await _count(database, Post) == 1
    assert (await _user(database, "ada.lovelace")).posts == 1


async def test_delete_removes_likes_post_and_recounts(call, create_user, database):
    ada = await create_user("ada.lovelace")
    bob = await create_user("bob.stone")
    post = body_of(await call("/posts", "POST", body={"message": LINE_A}, token=ada))
    await call("/posts/{id}/likes", "POST", path={"id": str(post["id"])}, token=bob)

    response = await call("/posts/{id}", "DELETE", path={"id": str(post["id"])}, token=ada)

    assert response["statusCode"] == 200
    assert response["body"] == "null"
    assert await _count(database, Post) == 0
    assert await _count(database, PostLike) == 0
    assert (await _user(database, "ada.lovelace")).posts == 0


async def test_delete_missing_post_is_404(call, create_user):
    ada = await create_user("ada.lovelace")
    response = await call("/posts/{id}", "DELETE", path={"id": "999"}, token=ada)
    assert response["statusCode"] == 404


async def test_like_is_idempotent(call, create_user, database):
    ada = await create_user("ada.lovelace")
    bob = await create_user("bob.stone")
    post = body_of(await call("/posts", "POST", body={"message": LINE_A}, token=ada))
    path = {"id": str(post["id"])}

    first = body_of(await call("/posts/{id}/likes", "POST", path=path, token=bob))
    second = body_of(await call("/posts/{id}/likes", "POST", path=path, token=bob))

    assert first["likes"] == 1 and first["is_liked"] is True
    assert second["likes"] == 1 and second["is_liked"] is True
    assert await _count(database, PostLike) == 1


async def test_concurrent_likes_count_once(call, create_user, database):
    ada = await create_user("ada.lovelace")
    bob = await create_user("bob.stone")
    post = body_of(await call("/posts", "POST", body={"message": LINE_A}, token=ada))
    path = {"id": str(post["id"])}

    responses = await asyncio.gather(*[
        call("/posts/{id}/likes", "POST", path=path, token=bob) for _ in range(5)
    ])

    assert [r["statusCode"] for r in responses] == [200] * 5
    assert await _count(database, PostLike) == 1
    async with database.session() as session:
        assert (await session.get(Post, post["id"])).likes == 1


async def test_like_count_equals_distinct_likers(call, create_user, database):
    ada = await create_user("ada.lovelace")
    bob = await create_user("bob.stone")
    carl = await create_user("carl.young")
    post = body_of(await call("/posts", "POST", body={"message": LINE_A}, token=ada))
    path = {"id": str(post["id"])}

    await call("/posts/{id}/likes", "POST", path=path, token=bob)
    await call("/posts/{id}/likes", "POST", path=path, token=bob)
    liked = body_of(await call("/posts/{id}/likes", "POST", path=path, token=carl))

    assert liked["likes"] == 2
    assert await _count(database, PostLike, PostLike.post_id == post["id"]) == 2


async def test_unlike_always_recounts_and_tolerates_missing_edge(call, create_user):
    ada = await create_user("ada.lovelace")
    bob = await create_user("bob.stone")
    post = body_of(await call("/posts", "POST", body={"message": LINE_A}, token=ada))
    path = {"id": str(post["id"])}

    never_liked = await call("/posts/{id}/likes", "DELETE", path=path, token=bob)
    await call("/posts/{id}/likes", "POST", path=path, token=bob)
    unliked = body_of(await call("/posts/{id}/likes", "DELETE", path=path, token=bob))

    assert never_liked["statusCode"] == 200
    assert body_of(never_liked)["likes"] == 0
    assert unliked["likes"] == 0
    assert unliked["is_liked"] is False


async def test_like_missing_post_is_404(call, create_user):
    bob = await create_user("bob.stone")
    response = await call("/posts/{id}/likes", "POST", path={"id": "999"}, token=bob)
    assert response["statusCode"] == 404


async def test_like_routes_absent_when_likes_disabled(tmp_path, database, token_service, create_user):
    settings = make_settings(tmp_path, LIKES_ENABLED=False)
    dispatcher = Dispatcher(settings, database, build_routes(settings), token_service=token_service)
    bob = await create_user("bob.stone")

    response = await dispatcher.dispatch(make_event("/posts/{id}/likes", "POST", path={"id": "1"}, token=bob))

    assert response["statusCode"] == 404
    assert response["body"] == "null"
