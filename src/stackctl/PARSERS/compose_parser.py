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
Parsers for Docker Compose YAML files.
"""
import logging
import os
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from ..exceptions import ConfigError
from ..MODELS.compose_file import ComposeFile, ComposeService
from ..UTILS.string_interpolation import EnvironmentInterpolator

logger = logging.getLogger(__name__)


class ComposeParser:
    """
    Parser for compose files. Only reads what stackctl reports on; the
    runtime remains the authority on what a compose file means.
    """
    def __init__(self, context: Optional[Dict[str, str]] = None):
        """
        Initializes the parser with an optional environment context for interpolation.

        :param context: A dictionary of environment variables for interpolation.
        """
        self.context = context if context is not None else dict(os.environ)

    def parse(self, compose_path: str) -> ComposeFile:
        """
        Parses a compose file from a path.

        :param compose_path: Path to the compose file.
        :return: Parsed compose file.
        """
        with open(compose_path, 'r') as f:
            content = f.read()
        return self.parse_from_string(content, source=compose_path)

    def parse_from_string(self, content: str, source: str = "<string>") -> ComposeFile:
        """
        Parses a compose file from a string.

        :param content: YAML content of the compose file.
        :param source: Name used in error messages.
        :return: Parsed compose file.
        :raises ConfigError: If the content is not a readable compose file.
        """
        # unset ${VAR} is an empty string for compose
        content = EnvironmentInterpolator.interpolate(content, self.context, strict=False)

        try:
            data = yaml.safe_load(content) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"{source}: invalid YAML: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{source}: expected a mapping at the top level")

        services_data = data.get('services') or {}
        volumes_data = data.get('volumes') or {}
        if not isinstance(services_data, dict) or not isinstance(volumes_data, dict):
            raise ConfigError(f"{source}: 'services' and 'volumes' must be mappings")

        try:
            services = {}
            for name, spec in services_data.items():
                spec = spec or {}
                if not isinstance(spec, dict):
                    raise ConfigError(f"{source}: service '{name}' must be a mapping")
                if not isinstance(spec.get('ports') or [], list):
                    raise ConfigError(f"{source}: ports of service '{name}' must be a list")
                services[str(name)] = self._parse_service(str(name), spec)

            return ComposeFile(
                services=services,
                volumes=[str(v) for v in volumes_data],
            )
        except ValidationError as e:
            raise ConfigError(f"{source}: {e}") from e

    def _parse_service(self, name: str, spec: Dict[str, Any]) -> ComposeService:
        build = spec.get('build')
        if isinstance(build, dict):
            build_context = build.get('context')
        else:
            build_context = build

        return ComposeService(
            name=name,
            image=spec.get('image'),
            build_context=build_context,
            ports=self._ports(spec.get('ports') or []),
        )

    def _ports(self, ports: List[Any]) -> List[str]:
        result = []
        for p in ports:
            if isinstance(p, dict):
                published = p.get('published')
                target = p.get('target')
                result.append(f"{published}:{target}" if published else str(target))
            else:
                result.append(str(p))
        return result
