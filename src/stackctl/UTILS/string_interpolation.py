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
Utilities for string interpolation using environment variables.
"""
import re
from typing import Dict

# Group 1: variable name, group 2: '-' or '+' modifier, group 3: alternate value
_PATTERN = re.compile(r'\$\{([^}:]+)(?::(-|\+)([^}]*))?\}')


class EnvironmentInterpolator:
    """
    Utility for interpolating environment variables in strings.
    Supports ${VAR}, ${VAR:-default} and ${VAR:+value}.
    """
    @staticmethod
    def interpolate(template: str, context: Dict[str, str], strict: bool = True) -> str:
        """
        Interpolates environment variables in the template string using the provided context.

        :param template: The string containing ${VAR} placeholders.
        :param context: The environment variables context.
        :param strict: Raise on an unset ${VAR}; otherwise substitute an empty string.
        :return: The interpolated string.
        :raises KeyError: If strict and a variable is not found and no default is provided.
        """
        def replace(match):
            var_name = match.group(1)
            modifier = match.group(2)
            alt_value = match.group(3)

            value = context.get(var_name)

            if modifier == '-':
                # unset or empty -> default
                return value if value else alt_value
            if modifier == '+':
                # set and non-empty -> alternate, else empty
                return alt_value if value else ''
            if value is not None:
                return value
            if strict:
                raise KeyError(f"Variable {var_name} not found in context")
            return ''

        return _PATTERN.sub(replace, template)
