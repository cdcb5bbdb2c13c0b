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
Parsers for .env files, supporting quotes, comments and export prefixes.
"""
import io
import os
from typing import Dict, Optional

from dotenv import dotenv_values


class EnvParser:
    """
    Parser for .env files.
    """
    @staticmethod
    def parse(env_path: str) -> Dict[str, str]:
        """
        Parses an .env file from a path.

        Args:
            env_path (str): Path to the .env file.

        Returns:
            Dict[str, str]: Dictionary of environment variables.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        if not os.path.isfile(env_path):
            raise FileNotFoundError(env_path)
        return EnvParser._clean(dotenv_values(env_path))

    @staticmethod
    def parse_from_string(content: str) -> Dict[str, str]:
        """
        Parses environment variables from a string.
        """
        return EnvParser._clean(dotenv_values(stream=io.StringIO(content)))

    @staticmethod
    def _clean(values: Dict[str, Optional[str]]) -> Dict[str, str]:
        # keys declared without '=' come back as None
        return {key: value for key, value in values.items() if value is not None}
