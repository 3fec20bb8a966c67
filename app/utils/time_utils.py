from datetime import datetime, timezone


def utcnow() -> datetime:
    """
    현재 UTC 시각 (tz 정보 없는 naive datetime)
    - DB DateTime 컬럼은 UTC naive 값으로 저장
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)
