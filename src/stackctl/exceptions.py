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
Errors raised by stackctl.

Outcomes that are not failures of stackctl itself (a child process exiting
nonzero, an operator declining a prompt, an unreachable health endpoint)
are returned as values instead.
"""
from typing import Iterable


class StackctlError(Exception):
    """Base class for all stackctl errors."""


class UnknownMode(StackctlError, ValueError):
    """Raised when an environment selector is not one of the known modes."""

    def __init__(self, mode: str, valid: Iterable[str]):
        self.mode = mode
        self.valid = sorted(valid)
        super().__init__(
            f"Unknown mode '{mode}'. Expected one of: {', '.join(self.valid)}"
        )


class RuntimeUnavailable(StackctlError):
    """Raised when the orchestration runtime binary cannot be invoked."""

    def __init__(self, binary: str, reason: str = "not found on PATH"):
        self.binary = binary
        super().__init__(f"Container runtime '{binary}' is unavailable: {reason}")


class ConfigError(StackctlError):
    """Raised when the project configuration file is malformed."""


class CredentialsUnavailable(StackctlError):
    """Raised when database credentials cannot be read from the env file."""
