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
HTTP health checks for the services of an environment.

Every endpoint is checked on its own; one failing or unreachable endpoint
never hides the result of another.
"""
import json
import logging
from dataclasses import dataclass
from http.client import HTTPException
from typing import Any, Callable, Dict, List, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

logger = logging.getLogger(__name__)


@dataclass
class EndpointHealth:
    """Result of checking one endpoint."""

    name: str
    url: str
    healthy: bool
    status_code: Optional[int] = None
    payload: Any = None
    error: Optional[str] = None

    def describe(self) -> str:
        """
        Human-readable body or failure reason.
        """
        if self.error:
            return f"{self.name} is not responding: {self.error}"
        if isinstance(self.payload, (dict, list)):
            return json.dumps(self.payload, indent=2, sort_keys=True)
        return str(self.payload or "")


class HealthChecker:
    """
    Queries health endpoints over HTTP.
    """

    def __init__(self, endpoints: Dict[str, str], timeout: float = 5.0,
                 opener: Callable[..., Any] = urlopen):
        """
        Args:
            endpoints: Service name to health URL.
            timeout: Seconds to wait for each endpoint.
            opener: urlopen-compatible callable.
        """
        self.endpoints = endpoints
        self.timeout = timeout
        self.opener = opener

    def check(self, name: str, url: str) -> EndpointHealth:
        """
        Checks a single endpoint. Never raises for network failures.
        """
        try:
            request = Request(url, headers={"Accept": "application/json"})
            with self.opener(request, timeout=self.timeout) as response:
                status = getattr(response, "status", None) or response.getcode()
                body = response.read().decode("utf-8", errors="replace")
        except HTTPError as e:
            return EndpointHealth(name=name, url=url, healthy=False,
                                  status_code=e.code, error=f"HTTP {e.code}")
        except URLError as e:
            return EndpointHealth(name=name, url=url, healthy=False, error=str(e.reason))
        except (HTTPException, TimeoutError, OSError, ValueError) as e:
            return EndpointHealth(name=name, url=url, healthy=False, error=str(e) or type(e).__name__)

        logger.debug("%s responded %s", url, status)
        return EndpointHealth(
            name=name,
            url=url,
            healthy=200 <= status < 300,
            status_code=status,
            payload=self._decode(body),
            error=None if 200 <= status < 300 else f"HTTP {status}",
        )

    def check_all(self) -> List[EndpointHealth]:
        """
        Checks every endpoint, in configuration order.
        """
        return [self.check(name, url) for name, url in self.endpoints.items()]

    @staticmethod
    def _decode(body: str) -> Any:
        try:
            return json.loads(body)
        except ValueError:
            return body.strip()
