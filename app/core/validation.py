"""
요청 본문 검증

경로마다 pydantic 요청 스키마와 선택적 제약 공급자(constraint provider)를 선언
- 제약 공급자는 요청 시점의 DB 상태로 검증 컨텍스트(허용 목록 등)를 만들어 반환
- 스키마의 field_validator가 ValidationInfo.context로 그 값을 읽어 검증
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError

from app.core.context import RequestContext
from app.repositories.user_repository import UserRepository
from app.repositories.vocabulary_repository import VocabularyRepository
from app.utils.exceptions import ValidationFailedError

logger = logging.getLogger(__name__)

ConstraintProvider = Callable[[RequestContext], Awaitable[Dict[str, Any]]]


def format_errors(exc: ValidationError) -> Dict[str, List[str]]:
    """pydantic 오류 목록을 {필드: [메시지, ...]} 형태로 변환"""
    errors: Dict[str, List[str]] = {}
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or "body"
        errors.setdefault(field, []).append(err["msg"])
    return errors


def validate_body(
        schema: Type[BaseModel],
        body: Any,
        context: Optional[Dict[str, Any]] = None,
) -> BaseModel:
    """
    본문을 스키마로 검증
    Raises:
        ValidationFailedError: 하나 이상의 필드가 규칙을 위반한 경우
    """
    if not isinstance(body, dict):
        raise ValidationFailedError({"body": ["JSON 객체여야 합니다."]})
    try:
        return schema.model_validate(body, context=context or {})
    except ValidationError as e:
        errors = format_errors(e)
        logger.info("요청 본문 검증 실패: %s", errors)
        raise ValidationFailedError(errors)


# ─── 제약 공급자 ─────────────────────────────────────────────────────────

async def message_allow_list(ctx: RequestContext) -> Dict[str, Any]:
    """
    게시글 메시지 허용 문구 목록
    - MESSAGE_ALLOW_LIST_ENABLED가 꺼져 있으면 길이 제한만 적용
    """
    context: Dict[str, Any] = {"max_length": ctx.settings.MESSAGE_MAX_LENGTH}
    if ctx.settings.MESSAGE_ALLOW_LIST_ENABLED:
        context["allowed_messages"] = await VocabularyRepository(ctx.session).list_lines()
    return context


async def follow_target(ctx: RequestContext) -> Dict[str, Any]:
    """
    팔로우 대상 검증용 컨텍스트
    - 요청된 대상 중 실제 존재하는 사용자명과 조회자 본인
    """
    candidate = ctx.body.get("follow") if isinstance(ctx.body, dict) else None
    known = await UserRepository(ctx.session).existing_usernames([candidate]) if candidate else set()
    return {"known_usernames": known, "viewer": ctx.viewer}
