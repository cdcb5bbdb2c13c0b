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
Loader for the stackctl.yaml project configuration.
"""
import logging
import os
from typing import Dict, Optional

import yaml
from pydantic import ValidationError

from ..exceptions import ConfigError
from ..MODELS.project_config import ProjectConfig
from ..UTILS.string_interpolation import EnvironmentInterpolator

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "stackctl.yaml"
CONFIG_ENV_VAR = "STACKCTL_CONFIG"


class ConfigParser:
    """
    Reads a project configuration file, interpolating ${VAR} placeholders
    from the process environment before validation.
    """
    def __init__(self, context: Optional[Dict[str, str]] = None):
        """
        :param context: Variables available for interpolation. Defaults to os.environ.
        """
        self.context = context if context is not None else dict(os.environ)

    def locate(self, explicit: Optional[str] = None) -> Optional[str]:
        """
        Finds the configuration file to load.

        An explicit path must exist. Otherwise STACKCTL_CONFIG and then
        ./stackctl.yaml are tried, and None means "use defaults".
        """
        if explicit:
            if not os.path.isfile(explicit):
                raise ConfigError(f"Config file not found: {explicit}")
            return explicit
        from_env = self.context.get(CONFIG_ENV_VAR)
        if from_env:
            if not os.path.isfile(from_env):
                raise ConfigError(f"Config file not found: {from_env} (from {CONFIG_ENV_VAR})")
            return from_env
        if os.path.isfile(DEFAULT_CONFIG_FILE):
            return DEFAULT_CONFIG_FILE
        return None

    def load(self, explicit: Optional[str] = None) -> ProjectConfig:
        """
        Locates and parses the configuration, falling back to defaults.
        """
        path = self.locate(explicit)
        if path is None:
            logger.debug("No config file found, using defaults")
            return ProjectConfig()
        logger.debug("Loading config from %s", path)
        with open(path, 'r') as f:
            content = f.read()
        return self.parse_from_string(content, source=path)

    def parse_from_string(self, content: str, source: str = "<string>") -> ProjectConfig:
        content = EnvironmentInterpolator.interpolate(content, self.context, strict=False)
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"{source}: invalid YAML: {e}") from e
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"{source}: top level must be a mapping")
        try:
            return ProjectConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"{source}: {e}") from e
