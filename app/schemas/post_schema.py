from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

# ─── 게시글 관련 요청/응답 스키마 정의 ───────────────────────────────────

class PostCreateRequest(BaseModel):
    """
    게시글 작성 요청 모델
    - 검증 컨텍스트에 allowed_messages가 있으면 그 안의 문구만 허용
    """
    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {"message": "Hope is the thing with feathers"}
        },
    )

    message: str = Field(..., min_length=1, description="게시글 본문")

    @field_validator("message")
    @classmethod
    def check_allowed(cls, v: str, info: ValidationInfo) -> str:
        if not v.strip():
            raise ValueError("빈 메시지는 작성할 수 없습니다.")
        context = info.context or {}
        max_length = context.get("max_length")
        if max_length is not None and len(v) > max_length:
            raise ValueError(f"메시지는 {max_length}자 이하여야 합니다.")
        allowed = context.get("allowed_messages")
        if allowed is not None and v not in allowed:
            raise ValueError("허용된 문구만 게시할 수 있습니다.")
        return v


class PostResponse(BaseModel):
    """
    게시글 응답 모델
    - is_liked: 조회자가 좋아요를 눌렀는지 여부 (익명이면 항상 false)
    """
    model_config = ConfigDict(from_attributes=True)

    id:         int                = Field(..., description="게시글 ID")
    username:   str                = Field(..., description="작성자 사용자명")
    message:    str                = Field(..., description="게시글 본문")
    likes:      int                = Field(..., description="좋아요 수")
    created_at: datetime           = Field(..., description="작성 시각(UTC)")
    updated_at: Optional[datetime] = Field(None, description="수정 시각(UTC)")
    is_liked:   bool               = Field(False, description="조회자의 좋아요 여부")
