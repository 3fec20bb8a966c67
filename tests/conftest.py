from typing import Any, Dict, Optional

import orjson
import pytest

from app.core.config import Settings
from app.core.database import Database
from app.core.router import Dispatcher
from app.jwt.token_service import TokenService
from app.models.user import User
from app.routers.registry import build_routes

TEST_SECRET = "test-secret-key"

# lines.json에 포함된 허용 문구
LINE_A = "Hope is the thing with feathers"
LINE_B = "That perches in the soul"
LINE_C = "I wandered lonely as a cloud"


def make_settings(tmp_path, **overrides) -> Settings:
    values = dict(
        JWT_SECRET_KEY=TEST_SECRET,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        HOUSEKEEPING_SAMPLE_RATE=0.0,
        DB_CONNECT_MAX_ATTEMPTS=2,
        DB_CONNECT_BACKOFF_SECONDS=0.0,
        WARM_UP_ENABLED=False,
        LOG_LEVEL="DEBUG",
    )
    values.update(overrides)
    return Settings(**values)


def make_event(
        resource: str,
        method: str = "GET",
        body: Any = None,
        token: Optional[str] = None,
        path: Optional[Dict[str, str]] = None,
        query: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    headers = {"Content-Type": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return {
        "resource": resource,
        "httpMethod": method,
        "headers": headers,
        "body": body if body is None or isinstance(body, str) else orjson.dumps(body).decode(),
        "pathParameters": path,
        "queryStringParameters": query,
        "isBase64Encoded": False,
    }


def body_of(response: Dict[str, Any]) -> Any:
    return orjson.loads(response["body"])


@pytest.fixture
def settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
async def database(settings):
    db = Database(settings)
    await db.init_schema()
    yield db
    await db.dispose()


@pytest.fixture
def token_service(settings) -> TokenService:
    return TokenService(settings)


@pytest.fixture
def dispatcher(settings, database, token_service) -> Dispatcher:
    return Dispatcher(settings, database, build_routes(settings), token_service=token_service)


@pytest.fixture
def call(dispatcher):
    """make_event 인자로 디스패처 호출"""
    async def _call(resource, method="GET", **kwargs):
        return await dispatcher.dispatch(make_event(resource, method, **kwargs))
    return _call


@pytest.fixture
def create_user(database, token_service):
    """
    사용자를 직접 저장하고 토큰 반환 (가입 API의 해시 비용 없이)
    """
    async def _create(username: str) -> str:
        first, last = username.split(".")
        user = User(
            username=username,
            first_name=first.capitalize(),
            last_name=last.capitalize(),
            password="not-a-hash",
        )
        async with database.session() as session:
            session.add(user)
            await session.commit()
        return token_service.issue(user)
    return _create
