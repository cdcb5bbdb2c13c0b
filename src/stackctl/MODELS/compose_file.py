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
Models for the subset of a compose file stackctl reads.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel


class ComposeService(BaseModel):
    """
    A service as declared in a compose file.
    """
    name: str
    image: Optional[str] = None
    build_context: Optional[str] = None
    ports: List[str] = []


class ComposeFile(BaseModel):
    """
    Services declared by one environment's compose file.
    """
    services: Dict[str, ComposeService] = {}
    volumes: List[str] = []
