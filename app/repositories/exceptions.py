"""
Repository 계층 예외 클래스들
"""

from app.utils.exceptions import ApiError


class RepositoryError(ApiError):
    """Repository 관련 기본 예외"""
    pass


class DatabaseCommitError(RepositoryError):
    """DB 커밋 관련 예외"""
    pass
