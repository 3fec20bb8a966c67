"""
로컬 실행용 FastAPI 어댑터

경로 테이블의 모든 Route를 HTTP 엔드포인트로 등록하고
요청을 게이트웨이 이벤트로 바꿔 서버리스와 같은 Dispatcher로 처리
"""

import base64
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import uvicorn
from fastapi import BackgroundTasks, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import Settings, get_settings
from app.core.database import Database
from app.core.logging_config import configure_logging
from app.core.router import Dispatcher, Route
from app.routers.registry import build_routes

logger = logging.getLogger(__name__)


def to_event(request: Request, route: Route, body: bytes) -> Dict[str, Any]:
    """HTTP 요청 → 게이트웨이 이벤트 (본문은 base64로 전달)"""
    return {
        "resource": route.resource,
        "httpMethod": request.method,
        "headers": dict(request.headers),
        "body": base64.b64encode(body).decode("ascii") if body else None,
        "isBase64Encoded": bool(body),
        "pathParameters": dict(request.path_params) or None,
        "queryStringParameters": dict(request.query_params) or None,
    }


def _endpoint(dispatcher: Dispatcher, route: Route):
    async def endpoint(request: Request, background_tasks: BackgroundTasks) -> Response:
        event = to_event(request, route, await request.body())
        result = await dispatcher.dispatch(event, housekeep=False)
        # 상주 서버에서는 정리 작업을 응답 전송 이후로 미룸
        background_tasks.add_task(dispatcher.maybe_housekeep)
        return Response(
            content=result["body"],
            status_code=result["statusCode"],
            headers=result["headers"],
        )
    return endpoint


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    애플리케이션 팩토리
    - settings/database를 주입하지 않으면 환경 설정으로 생성
    """
    settings = settings or get_settings()
    owns_database = database is None
    database = database or Database(settings)
    configure_logging(settings.LOG_LEVEL)
    dispatcher = Dispatcher(settings, database, build_routes(settings))

    # ─── 애플리케이션 수명 주기 이벤트 핸들러 정의 ─────────────────────────
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """앱 시작 시 테이블 생성 및 기초 데이터 적재"""
        if settings.DB_AUTO_CREATE:
            await database.init_schema()
        yield
        if owns_database:
            await database.dispose()

    app = FastAPI(
        title="Pintagram API",
        description="허용 문구 게시, 팔로우 타임라인, 좋아요 기능 제공",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.dispatcher = dispatcher

    # ─── CORS 설정 (preflight 처리) ──────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.ALLOW_ORIGIN],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[settings.REFRESH_TOKEN_HEADER],
    )

    @app.get("/health")
    async def health_check() -> dict:
        """
        서비스 상태 확인용 엔드포인트
        """
        return {"status": "ok"}

    # ─── 경로 등록 ───────────────────────────────────────────────────────
    for route in dispatcher.table:
        app.add_api_route(
            route.resource,
            _endpoint(dispatcher, route),
            methods=[route.method],
            name=f"{route.method} {route.resource}",
        )
    logger.debug("경로 %d개 등록", len(dispatcher.table))
    return app


if __name__ == "__main__":
    uvicorn.run(
        "app.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=True
    )
