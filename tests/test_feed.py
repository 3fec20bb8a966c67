from tests.conftest import LINE_A, LINE_B, LINE_C, body_of


async def _post(call, token, message=LINE_A):
    response = await call("/posts", "POST", body={"message": message}, token=token)
    assert response["statusCode"] == 200
    return body_of(response)


async def test_user_posts_are_oldest_first_with_cursor(call, create_user):
    ada = await create_user("ada.lovelace")
    first = await _post(call, ada, LINE_A)
    second = await _post(call, ada, LINE_B)
    third = await _post(call, ada, LINE_C)

    response = await call("/users/{username}/posts", path={"username": "ada.lovelace"})
    ids = [p["id"] for p in body_of(response)]
    assert ids == [first["id"], second["id"], third["id"]]

    page = await call(
        "/users/{username}/posts",
        path={"username": "ada.lovelace"},
        query={"posts_before": str(third["id"])},
    )
    assert [p["id"] for p in body_of(page)] == [first["id"], second["id"]]


async def test_user_posts_for_unknown_user_is_404(call):
    response = await call("/users/{username}/posts", path={"username": "nobody.here"})
    assert response["statusCode"] == 404


async def test_user_posts_cursor_must_be_integer(call, create_user):
    await create_user("ada.lovelace")
    response = await call(
        "/users/{username}/posts",
        path={"username": "ada.lovelace"},
        query={"posts_before": "abc"},
    )
    assert response["statusCode"] == 400


async def test_is_liked_is_personalised_per_viewer(call, create_user):
    ada = await create_user("ada.lovelace")
    bob = await create_user("bob.stone")
    post = await _post(call, ada)
    await call("/posts/{id}/likes", "POST", path={"id": str(post["id"])}, token=bob)

    as_bob = body_of(await call("/users/{username}/posts", path={"username": "ada.lovelace"}, token=bob))
    as_ada = body_of(await call("/users/{username}/posts", path={"username": "ada.lovelace"}, token=ada))
    anonymous = body_of(await call("/users/{username}/posts", path={"username": "ada.lovelace"}))

    assert as_bob[0]["is_liked"] is True
    assert as_ada[0]["is_liked"] is False
    assert anonymous[0]["is_liked"] is False
    assert anonymous[0]["likes"] == 1


async def test_timeline_contains_own_and_followed_posts_newest_first(call, create_user):
    ada = await create_user("ada.lovelace")
    bob = await create_user("bob.stone")
    carl = await create_user("carl.young")
    await call("/follow", "POST", body={"follow": "bob.stone"}, token=ada)

    own = await _post(call, ada, LINE_A)
    followed = await _post(call, bob, LINE_B)
    await _post(call, carl, LINE_C)
    latest = await _post(call, ada, LINE_C)

    timeline = body_of(await call("/timeline", token=ada))

    assert [p["id"] for p in timeline] == [latest["id"], followed["id"], own["id"]]
    assert {p["username"] for p in timeline} == {"ada.lovelace", "bob.stone"}


async def test_timeline_pages_by_id_cursor(call, create_user, settings):
    ada = await create_user("ada.lovelace")
    created = [await _post(call, ada) for _ in range(settings.TIMELINE_PAGE_SIZE + 2)]

    first_page = body_of(await call("/timeline", token=ada))
    assert len(first_page) == settings.TIMELINE_PAGE_SIZE
    assert first_page[0]["id"] == created[-1]["id"]

    cursor = first_page[-1]["id"]
    second_page = body_of(await call("/timeline", token=ada, query={"posts_before": str(cursor)}))

    assert [p["id"] for p in second_page] == [created[1]["id"], created[0]["id"]]
    assert all(p["id"] < cursor for p in second_page)


async def test_timeline_requires_token(call):
    response = await call("/timeline")
    assert response["statusCode"] == 401
