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
Managers for resolving a requested mode into a concrete environment.
"""
from typing import Optional

from ..exceptions import UnknownMode
from ..MODELS.environment import Environment, Mode
from ..MODELS.project_config import ProjectConfig

DEFAULT_MODE = Mode.DEV


class EnvironmentResolver:
    """
    Maps a mode name onto the compose file, env file and health endpoints
    configured for it. The only reader of raw environment configuration.
    """
    def __init__(self, config: Optional[ProjectConfig] = None):
        """
        :param config: Project configuration. Defaults are used when omitted.
        """
        self.config = config or ProjectConfig()

    @property
    def modes(self):
        return [mode.value for mode in self.config.environments]

    def resolve(self, mode: Optional[str] = None) -> Environment:
        """
        Resolves a mode name into an Environment.

        :param mode: 'dev' or 'prod', case-insensitive. None or blank means dev.
        :return: The resolved environment.
        :raises UnknownMode: If the mode is not configured.
        """
        name = (mode or "").strip().lower()
        if not name:
            selected = DEFAULT_MODE
        else:
            try:
                selected = Mode(name)
            except ValueError:
                raise UnknownMode(mode, self.modes) from None

        env_config = self.config.environments.get(selected)
        if env_config is None:
            raise UnknownMode(mode or selected.value, self.modes)

        return Environment(
            name=selected,
            compose_file=env_config.compose_file,
            env_file=env_config.env_file or self.config.env_file,
            health_endpoints=dict(env_config.health_endpoints),
        )

    def resolve_all(self):
        """
        Resolves every configured environment, in declaration order.
        """
        return [self.resolve(mode) for mode in self.modes]
