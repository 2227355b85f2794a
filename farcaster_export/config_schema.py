from __future__ import annotations

import re
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

_ENV_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _validate_env_var_name(value: str) -> str:
    name = (value or "").strip()
    if not _ENV_NAME_RE.fullmatch(name):
        raise ValueError("must be a valid environment variable name")
    return name


PositiveInt = Annotated[int, Field(ge=1)]


class NeynarConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    api_key_env: str = "NEYNAR_API_KEY"
    base_url: str = "https://api.neynar.com"
    timeout_seconds: float = Field(40.0, gt=0.0)
    page_limit: PositiveInt | None = None  # None leaves the page size to the API

    @field_validator("api_key_env")
    @classmethod
    def _api_key_env_must_be_valid(cls, v: str) -> str:
        return _validate_env_var_name(v)

    @field_validator("base_url")
    @classmethod
    def _base_url_must_be_http(cls, v: str) -> str:
        url = (v or "").strip().rstrip("/")
        if not url.startswith(("http://", "https://")):
            raise ValueError("must start with http:// or https://")
        return url


class ExportConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    max_pages: PositiveInt = 10
    out_dir: str = "."


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    neynar: NeynarConfig = Field(default_factory=NeynarConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
