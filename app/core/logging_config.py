import logging

# 과도한 로그를 남기는 외부 라이브러리
_NOISY_LOGGERS = ("asyncmy", "aiosqlite", "passlib", "sqlalchemy.pool")


def configure_logging(level: str = "INFO") -> None:
    """
    루트 로거 설정 (프로세스당 한 번)
    - 서버리스 런타임이 미리 핸들러를 붙여둔 경우에도 포맷과 레벨을 맞춤
    """
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
