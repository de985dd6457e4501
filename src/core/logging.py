import logging

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

SQL_LOGGER = "sqlalchemy.engine"


def setup_logging(level: str = "INFO", sql_echo: bool = False) -> None:
    """루트 로거 설정. sql_echo: SQL 문을 같은 포맷으로 INFO 출력."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )
    logging.getLogger(SQL_LOGGER).setLevel(logging.INFO if sql_echo else logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
