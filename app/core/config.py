from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, ValidationInfo, field_validator
from pathlib import Path
from functools import lru_cache
from typing import Optional

# 프로젝트 루트 디렉토리
BASE_DIR = Path(__file__).resolve().parent.parent

# posts.message 컬럼 길이 (MESSAGE_MAX_LENGTH 상한)
MESSAGE_COLUMN_LENGTH = 1000


class Settings(BaseSettings):
    """
    애플리케이션 환경 설정 모델
    - config/settings.env 파일과 환경 변수를 자동 로드
    - 프로세스 시작 시 한 번 생성되어 각 컴포넌트에 명시적으로 전달됨
    """
    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / "config" / "settings.env"),
        env_file_encoding="utf-8",
        extra='ignore',
    )

    # Security & JWT
    JWT_SECRET_KEY: str = Field(..., description="토큰 서명용 비밀 키")
    JWT_ALGORITHM: str = Field("HS256", description="토큰 서명 알고리즘")
    TOKEN_HARD_EXPIRES_HOURS: int = Field(
        24,
        description="토큰 최대 유효 시간(시간), 초과 시 무조건 만료",
    )
    TOKEN_SOFT_REFRESH_MINUTES: int = Field(
        60,
        description="발급 후 이 시간(분)이 지나면 응답 시 새 토큰을 재발급",
    )
    REFRESH_TOKEN_HEADER: str = Field(
        "X-Refresh-Token",
        description="재발급/에코된 토큰을 담는 응답 헤더 이름",
    )

    # CORS
    ALLOW_ORIGIN: str = Field("*", description="Access-Control-Allow-Origin 값")

    # Database
    DB_USER:     str = "pintagram"
    DB_PASSWORD: str = "pintagram_pw"
    DB_HOST:     str = "localhost"
    DB_PORT:     int = 3306
    DB_NAME:     str = "pintagram"
    DATABASE_URL: Optional[str] = Field(
        None,
        validate_default=True,
        description="전체 DB 연결 URL (우선순위: env > 자동 조합)",
    )
    DB_ECHO: bool = Field(False, description="실행되는 SQL 로그 출력 여부")
    DB_POOL_SIZE: int = Field(5, description="커넥션 풀 크기")
    DB_POOL_RECYCLE: int = Field(1800, description="커넥션 재활용 주기(초)")
    DB_CONNECT_MAX_ATTEMPTS: int = Field(5, description="DB 연결 확인 최대 시도 횟수")
    DB_CONNECT_BACKOFF_SECONDS: float = Field(1.0, description="DB 연결 재시도 간격(초)")
    DB_AUTO_CREATE: bool = Field(True, description="로컬 서버 시작 시 테이블 생성 및 기초 데이터 적재")

    # Warm-up
    WARM_UP_ENABLED: bool = Field(True, description="콜드 스타트 DB 깨우기 단계 사용 여부")
    WARM_UP_SAFETY_MARGIN_SECONDS: float = Field(
        1.0,
        description="남은 실행 시간에서 빼는 안전 여유(초)",
    )
    WARM_UP_DEFAULT_TIMEOUT_SECONDS: float = Field(
        5.0,
        description="남은 실행 시간을 알 수 없을 때 사용하는 깨우기 제한 시간(초)",
    )

    # Housekeeping
    HOUSEKEEPING_SAMPLE_RATE: float = Field(
        0.01,
        ge=0.0,
        le=1.0,
        description="요청당 만료 토큰 정리 작업을 수행할 확률",
    )
    HOUSEKEEPING_TIMEOUT_SECONDS: float = Field(
        0.5, description="정리 작업 제한 시간(초), 서버리스에서는 응답 전에 실행되므로 짧게 유지"
    )

    # Features
    LIKES_ENABLED: bool = Field(True, description="좋아요 기능 사용 여부")
    MESSAGE_ALLOW_LIST_ENABLED: bool = Field(
        True,
        description="게시글 메시지를 허용 문구(lines) 목록으로 제한할지 여부",
    )
    MESSAGE_MAX_LENGTH: int = Field(
        255,
        ge=1,
        le=MESSAGE_COLUMN_LENGTH,
        description="게시글 메시지 최대 길이",
    )

    # Pagination
    USER_POSTS_PAGE_SIZE: int = Field(20, description="사용자 게시글 페이지 크기")
    TIMELINE_PAGE_SIZE: int = Field(10, description="타임라인 페이지 크기")
    USERS_PAGE_SIZE: int = Field(20, description="사용자 랭킹 페이지 크기")

    # Logging
    LOG_LEVEL: str = Field("INFO", description="루트 로그 레벨")

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def _assemble_database_url(cls, v: Optional[str], info: ValidationInfo) -> str:
        """
        DATABASE_URL이 설정되어 있으면 그대로 사용하고, 없으면 개별 DB 설정값으로 URL을 조합
        """
        if v:
            return v
        values = info.data
        user = values.get("DB_USER")
        pw   = values.get("DB_PASSWORD")
        host = values.get("DB_HOST")
        port = values.get("DB_PORT")
        name = values.get("DB_NAME")
        return f"mysql+asyncmy://{user}:{pw}@{host}:{port}/{name}?charset=utf8mb4"

    @property
    def is_sqlite(self) -> bool:
        """SQLite(테스트/로컬) 연결 여부"""
        return self.DATABASE_URL.startswith("sqlite")


@lru_cache()
def get_settings() -> Settings:
    """
    Settings 인스턴스를 싱글톤으로 반환
    최초 호출 시 객체를 생성하고, 이후 캐싱된 인스턴스를 반환
    """
    return Settings()
