"""Runtime configuration for mc-status."""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mc_status.models import ServerEndpoint

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(env_prefix="MC_STATUS_", env_file=".env", extra="ignore")

    app_name: str = "mc-status"
    log_level: LogLevel = "INFO"
    primary_api_url: str = Field(
        default="https://uapis.cn/api/v1/game/minecraft/serverstatus",
        description="Status endpoint queried with ?server=<address>.",
    )
    legacy_api_url: str = Field(
        default="https://api.mcsrvstat.us/2",
        description="Base URL of the mcsrvstat.us v2 API; the address is appended as a path segment.",
    )
    avatar_url_template: str = "https://cravatar.eu/helmavatar/{username}/64.png"
    cache_ttl_seconds: float = 30.0
    request_timeout_seconds: float = 5.0
    refresh_interval_seconds: float = 30.0
    user_agent: str = "mc-status/0.1"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


CONFIGURED_SERVERS: tuple[ServerEndpoint, ...] = (
    ServerEndpoint(
        key="1",
        name="一服 - 生电插件服",
        address="play.simpfun.cn:30786",
        description="插件服，鼓励生电",
        category="plugin",
    ),
    ServerEndpoint(
        key="2",
        name="二服 - 整合包服",
        address="play.simpfun.cn:17795",
        description="整合包服，需下载客户端",
        category="modpack",
    ),
)


settings = Settings()
