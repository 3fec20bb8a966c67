from typing import List

from app.core.config import Settings
from app.core.router import Route
from app.routers import auth_router, post_router, user_router

# 경로 모듈 등록 순서
ROUTER_MODULES = (auth_router, user_router, post_router)


def build_routes(settings: Settings) -> List[Route]:
    """모든 경로 모듈의 Route를 모아 반환 (프로세스당 한 번)"""
    routes: List[Route] = []
    for module in ROUTER_MODULES:
        routes.extend(module.get_routes(settings))
    return routes
