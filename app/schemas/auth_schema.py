from pydantic import BaseModel, ConfigDict, Field

# ─── 인증 관련 요청/응답 스키마 정의 ─────────────────────────────────────

class LoginRequest(BaseModel):
    """
    로그인 요청 모델
    - 사용자명과 비밀번호로 인증 수행
    """
    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {"username": "emily.dickinson", "password": "QuietRiver"}
        },
    )

    username: str = Field(..., min_length=1, max_length=120, description="사용자명")
    password: str = Field(..., min_length=1, description="비밀번호")


class IdentityResponse(BaseModel):
    """현재 토큰의 사용자 정보"""
    username:   str = Field(..., description="사용자명")
    first_name: str = Field(..., description="이름")
    last_name:  str = Field(..., description="성")


class LoginResponse(IdentityResponse):
    """
    로그인 응답 모델
    - 사용자 정보와 Bearer 토큰
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "username": "emily.dickinson",
                "first_name": "Emily",
                "last_name": "Dickinson",
                "token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
            }
        },
    )

    token: str = Field(..., description="Bearer 토큰")


class RegisterResponse(LoginResponse):
    """
    가입 응답 모델
    - 생성된 평문 비밀번호는 이 응답에서 한 번만 노출
    """
    password: str = Field(..., description="생성된 비밀번호")


class MessageResponse(BaseModel):
    """
    단순 메시지 응답 모델
    - API 처리 결과를 간단한 메시지로 반환할 때 사용
    """
    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {"message": "Operation successful"}
        },
    )

    message: str = Field(..., description="응답 메시지")
