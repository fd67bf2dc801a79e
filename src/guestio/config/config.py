from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

from guestio.streams.bounded import DEFAULT_CAPACITY

# Priority: ./.env > ../.env
cwd = Path.cwd()
local_env = cwd / ".env"
parent_env = cwd.parent / ".env"

env_file = None
if local_env.exists():
    env_file = local_env
elif parent_env.exists():
    env_file = parent_env

if env_file:
    load_dotenv(env_file, override=False)


class GuestIOConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="GUESTIO_",
        env_file=env_file,
        env_file_encoding="utf-8",
        extra="ignore"
    )

    default_capacity: int = Field(default=DEFAULT_CAPACITY, ge=0)
    deterministic_stdin: str = ""
    log_level: str = "WARNING"


def load_config() -> GuestIOConfig:
    return GuestIOConfig()
