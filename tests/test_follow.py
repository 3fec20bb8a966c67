import asyncio

from sqlalchemy import func, select

from app.models.follower import Follower
from tests.conftest import body_of


async def _edges(database):
    async with database.session() as session:
        return (await session.execute(select(func.count()).select_from(Follower))).scalar_one()


async def test_follow_is_idempotent(call, create_user, database):
    ada = await create_user("ada.lovelace")
    await create_user("bob.stone")

    first = await call("/follow", "POST", body={"follow": "bob.stone"}, token=ada)
    second = await call("/follow", "POST", body={"follow": "bob.stone"}, token=ada)

    assert first["statusCode"] == 200
    assert second["statusCode"] == 200
    assert body_of(first)["following"] == "bob.stone"
    assert body_of(second)["username"] == "ada.lovelace"
    assert await _edges(database) == 1


async def test_follow_unknown_user_or_self_is_rejected(call, create_user, database):
    ada = await create_user("ada.lovelace")

    unknown = await call("/follow", "POST", body={"follow": "nobody.here"}, token=ada)
    own = await call("/follow", "POST", body={"follow": "ada.lovelace"}, token=ada)
    missing = await call("/follow", "POST", body={}, token=ada)

    assert unknown["statusCode"] == 400
    assert "follow" in body_of(unknown)["errors"]
    assert own["statusCode"] == 400
    assert missing["statusCode"] == 400
    assert await _edges(database) == 0


async def test_follow_requires_token(call, create_user):
    await create_user("bob.stone")
    response = await call("/follow", "POST", body={"follow": "bob.stone"})
    assert response["statusCode"] == 401


async def test_unfollow_removes_edge_and_tolerates_absence(call, create_user, database):
    ada = await create_user("ada.lovelace")
    await create_user("bob.stone")
    await call("/follow", "POST", body={"follow": "bob.stone"}, token=ada)

    removed = await call("/unfollow", "POST", body={"follow": "bob.stone"}, token=ada)
    again = await call("/unfollow", "POST", body={"follow": "bob.stone"}, token=ada)

    assert body_of(removed) == {"username": "ada.lovelace", "following": "bob.stone", "created_at": None}
    assert again["statusCode"] == 200
    assert await _edges(database) == 0


async def test_followings_are_listed_by_target_name(call, create_user):
    ada = await create_user("ada.lovelace")
    await create_user("carl.young")
    await create_user("bob.stone")
    await call("/follow", "POST", body={"follow": "carl.young"}, token=ada)
    await call("/follow", "POST", body={"follow": "bob.stone"}, token=ada)

    response = await call("/followings", token=ada)

    assert [edge["following"] for edge in body_of(response)] == ["bob.stone", "carl.young"]


async def test_concurrent_follows_create_one_edge(call, create_user, database):
    ada = await create_user("ada.lovelace")
    await create_user("bob.stone")

    responses = await asyncio.gather(*[
        call("/follow", "POST", body={"follow": "bob.stone"}, token=ada) for _ in range(5)
    ])

    assert [r["statusCode"] for r in responses] == [200] * 5
    assert {body_of(r)["following"] for r in responses} == {"bob.stone"}
    assert await _edges(database) == 1


async def test_unfollow_then_follow_recreates_one_edge(call, create_user, database):
    ada = await create_user("ada.lovelace")
    await create_user("bob.stone")
    await call("/follow", "POST", body={"follow": "bob.stone"}, token=ada)
    await call("/unfollow", "POST", body={"follow": "bob.stone"}, token=ada)

    again = await call("/follow", "POST", body={"follow": "bob.stone"}, token=ada)
    followings = body_of(await call("/followings", token=ada))

    assert again["statusCode"] == 200
    assert body_of(again)["created_at"] is not None
    assert [edge["following"] for edge in followings] == ["bob.stone"]
    assert await _edges(database) == 1
