from typing import Dict, List


class ApiError(Exception):
    """
    기본 API 예외의 최상위 클래스
    - 모든 커스텀 API 예외가 이 클래스를 상속
    - 디스패처의 예외 매핑(EXCEPTION_STATUS_MAP)에 의해 응답 코드로 변환
    """
    def __init__(self, message: str):
        """
        - message: 사용자에게 전달할 예외 메시지 문자열
        """
        # 예외 메시지 설정
        self.message = message
        # 상위 Exception 초기화
        super().__init__(message)

    def to_payload(self) -> dict:
        """응답 본문으로 직렬화할 페이로드"""
        return {"detail": self.message}


class BadRequestError(ApiError):
    """400 Bad Request"""
    pass


class ValidationFailedError(BadRequestError):
    """
    400 Bad Request (요청 본문 검증 실패)
    - errors: 필드명 → 위반한 규칙 메시지 목록
    """
    def __init__(self, errors: Dict[str, List[str]], message: str = "요청 값이 올바르지 않습니다."):
        self.errors = errors
        super().__init__(message)

    def to_payload(self) -> dict:
        return {"detail": self.message, "errors": self.errors}


class BadCredentialsError(BadRequestError):
    """400 Bad Request (아이디/비밀번호 불일치, 어느 쪽이 틀렸는지 구분하지 않음)"""
    def __init__(self, message: str = "아이디 또는 비밀번호가 올바르지 않습니다."):
        super().__init__(message)


class UnauthorizedError(ApiError):
    """401 Unauthorized"""
    pass


class NotFoundError(ApiError):
    """404 Not Found"""
    pass


class ConflictError(ApiError):
    """409 Conflict"""
    pass


class DatabaseUnavailableError(ApiError):
    """503 Service Unavailable (재시도 후에도 DB 연결 실패)"""
    pass
