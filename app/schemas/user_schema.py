from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# ─── 사용자 관련 응답 스키마 정의 ────────────────────────────────────────

class UserResponse(BaseModel):
    """
    사용자 프로필 응답 모델 (비밀번호 해시는 제외)
    """
    model_config = ConfigDict(from_attributes=True)

    username:   str      = Field(..., description="사용자명")
    first_name: str      = Field(..., description="이름")
    last_name:  str      = Field(..., description="성")
    posts:      int      = Field(..., description="작성한 게시글 수")
    created_at: datetime = Field(..., description="가입 시각(UTC)")
