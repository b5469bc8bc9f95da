from typing import Optional

from pydantic_settings import BaseSettings


class LoggerConfig(BaseSettings):
    LOGGING_LEVEL: str = 'INFO'
    # console and/or logstash
    LOG_HANDLERS: list[str] = ['console']
    LOGSTASH: str = 'localhost'
    LOGSTASH_PORT: int = 5959
    LOGSTASH_LOGGING_LEVEL: str = 'DEBUG'
    # sqlite file buffering events while logstash is unreachable, in-memory when unset
    LOGSTASH_DATABASE_PATH: Optional[str] = None
    LOGSTASH_EVENT_TTL: int = 30  # sec
