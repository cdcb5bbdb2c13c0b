# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Models for the optional stackctl.yaml project configuration.
"""
import re
from typing import Dict, List

from pydantic import BaseModel, Field, field_validator

from .environment import Mode

DEFAULT_GATEWAY_URL = "http://localhost:5921"
_ENV_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_TOOL_RE = re.compile(r"^[A-Za-z0-9_./-]+$")


def _default_health_endpoints() -> Dict[str, str]:
    return {
        "gateway": f"{DEFAULT_GATEWAY_URL}/health",
        "backend": f"{DEFAULT_GATEWAY_URL}/api/health",
    }


class EnvironmentConfig(BaseModel):
    """
    Per-mode settings before resolution.
    """
    compose_file: str
    env_file: str = ""
    health_endpoints: Dict[str, str] = Field(default_factory=_default_health_endpoints)


class DatabaseConfig(BaseModel):
    """
    Where the primary data store lives and which env file keys hold its
    credentials.
    """
    service: str = "mongo"
    shell: str = "mongosh"
    dump: str = "mongodump"
    username_key: str = "MONGO_INITDB_ROOT_USERNAME"
    password_key: str = "MONGO_INITDB_ROOT_PASSWORD"
    database_key: str = "MONGO_DATABASE"

    @field_validator("username_key", "password_key", "database_key")
    @classmethod
    def _valid_key(cls, value: str) -> str:
        # keys are expanded by a shell inside the container
        if not _ENV_KEY_RE.match(value):
            raise ValueError(f"not a valid environment variable name: {value!r}")
        return value

    @field_validator("shell", "dump")
    @classmethod
    def _valid_tool(cls, value: str) -> str:
        if not _TOOL_RE.match(value):
            raise ValueError(f"not a plain command name: {value!r}")
        return value


def _default_environments() -> Dict[Mode, EnvironmentConfig]:
    return {
        Mode.DEV: EnvironmentConfig(compose_file="docker/compose.development.yaml"),
        Mode.PROD: EnvironmentConfig(compose_file="docker/compose.production.yaml"),
    }


class ProjectConfig(BaseModel):
    """
    Complete configuration for a project's environments.
    Every field has a default, so an absent config file is valid.
    """
    runtime: List[str] = ["docker", "compose"]
    env_file: str = ".env"
    default_service: str = "backend"
    shell_command: List[str] = ["sh"]
    backup_dir: str = "backups"
    health_timeout: float = 5.0
    environments: Dict[Mode, EnvironmentConfig] = Field(default_factory=_default_environments)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    @field_validator("runtime", "shell_command")
    @classmethod
    def _non_empty(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("must contain at least one element")
        return value

    @field_validator("environments")
    @classmethod
    def _fill_missing_modes(cls, value: Dict[Mode, EnvironmentConfig]) -> Dict[Mode, EnvironmentConfig]:
        merged = _default_environments()
        merged.update(value)
        return merged
