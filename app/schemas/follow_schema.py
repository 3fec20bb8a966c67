from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

# ─── 팔로우 관련 요청/응답 스키마 정의 ───────────────────────────────────

class FollowRequest(BaseModel):
    """
    팔로우 요청 모델
    - follow: 존재하는 다른 사용자의 사용자명이어야 함
    """
    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={"example": {"follow": "emily.dickinson"}},
    )

    follow: str = Field(..., min_length=1, description="팔로우할 사용자명")

    @field_validator("follow")
    @classmethod
    def check_target(cls, v: str, info: ValidationInfo) -> str:
        context = info.context or {}
        if "viewer" in context and v == context["viewer"]:
            raise ValueError("자기 자신은 팔로우할 수 없습니다.")
        known = context.get("known_usernames")
        if known is not None and v not in known:
            raise ValueError("존재하지 않는 사용자입니다.")
        return v


class UnfollowRequest(BaseModel):
    """언팔로우 요청 모델"""
    model_config = ConfigDict(extra="ignore")

    follow: str = Field(..., min_length=1, description="언팔로우할 사용자명")


class FollowResponse(BaseModel):
    """팔로우 관계(엣지) 응답 모델"""
    model_config = ConfigDict(from_attributes=True)

    username:   str                = Field(..., description="팔로우하는 사용자명")
    following:  str                = Field(..., description="팔로우 대상 사용자명")
    created_at: Optional[datetime] = Field(None, description="팔로우 시각(UTC)")
