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
Models for resolved deployment environments.
"""
from enum import Enum
from typing import Dict

from pydantic import BaseModel, ConfigDict


class Mode(str, Enum):
    """
    Named deployment configurations.
    """
    DEV = "dev"
    PROD = "prod"


class Environment(BaseModel):
    """
    A fully resolved environment: which compose file and env file every
    runtime command of this invocation is issued against.
    """
    model_config = ConfigDict(frozen=True)

    name: Mode
    compose_file: str
    env_file: str
    health_endpoints: Dict[str, str] = {}
