from datetime import datetime

import orjson

from app.core.envelope import build_response
from app.schemas.user_schema import UserResponse
from tests.conftest import make_settings


def test_null_payload_serializes_to_null_body(tmp_path):
    response = build_response(None, 404, make_settings(tmp_path))

    assert response["statusCode"] == 404
    assert response["body"] == "null"


def test_fixed_headers_and_optional_refresh_header(tmp_path):
    settings = make_settings(tmp_path, ALLOW_ORIGIN="https://pintagram.example")

    plain = build_response({"ok": True}, 200, settings)
    refreshed = build_response({"ok": True}, 200, settings, refreshed_token="abc")

    assert plain["headers"]["Access-Control-Allow-Origin"] == "https://pintagram.example"
    assert plain["headers"]["Access-Control-Allow-Credentials"] == "true"
    assert plain["headers"]["Access-Control-Expose-Headers"] == "X-Refresh-Token"
    assert "X-Refresh-Token" not in plain["headers"]
    assert refreshed["headers"]["X-Refresh-Token"] == "abc"


def test_pydantic_payloads_are_serialized(tmp_path):
    user = UserResponse(
        username="ada.lovelace",
        first_name="Ada",
        last_name="Lovelace",
        posts=3,
        created_at=datetime(2024, 5, 1, 12, 0),
    )
    response = build_response([user], 200, make_settings(tmp_path))

    body = orjson.loads(response["body"])
    assert body == [{
        "username": "ada.lovelace",
        "first_name": "Ada",
        "last_name": "Lovelace",
        "posts": 3,
        "created_at": "2024-05-01T12:00:00",
    }]
