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
Models for a single runtime command and the prompt guarding it.
"""
from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, model_validator

from .environment import Environment


class Verb(str, Enum):
    """
    Operations the dispatcher knows how to translate into runtime commands.
    """
    UP = "up"
    DOWN = "down"
    BUILD = "build"
    LOGS = "logs"
    RESTART = "restart"
    SHELL = "shell"
    PS = "ps"
    EXEC = "exec"


# Verbs that cannot be issued without a target service.
SERVICE_REQUIRED = frozenset({Verb.LOGS, Verb.SHELL, Verb.EXEC})


class Invocation(BaseModel):
    """
    One command against the runtime. Built per call and discarded afterwards.

    ``child_env`` holds values injected into the child's environment rather
    than its command line; ``exec_options`` are runtime options placed before
    the service name of an ``exec``.
    """
    model_config = ConfigDict(frozen=True)

    verb: Verb
    environment: Environment
    service: Optional[str] = None
    extra_args: Tuple[str, ...] = ()
    exec_options: Tuple[str, ...] = ()
    child_env: Dict[str, str] = {}
    interactive: bool = True

    @model_validator(mode="after")
    def _check_service(self) -> "Invocation":
        if self.verb in SERVICE_REQUIRED and not self.service:
            raise ValueError(f"verb '{self.verb.value}' requires a service")
        return self


class ConfirmationPrompt(BaseModel):
    """
    Question shown before a destructive action. Anything but an explicit
    yes is a refusal.
    """
    model_config = ConfigDict(frozen=True)

    message: str
    warning: Optional[str] = None

    def render(self) -> str:
        return f"{self.message} [y/N]"
