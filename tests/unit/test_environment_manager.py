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
Unit tests for environment resolution.
"""
import pytest

from stackctl.exceptions import UnknownMode
from stackctl.MANAGERS.environment_manager import EnvironmentResolver
from stackctl.MODELS.environment import Mode
from stackctl.MODELS.project_config import EnvironmentConfig, ProjectConfig


class TestEnvironmentResolver:
    """Tests for EnvironmentResolver."""

    def test_resolve_dev(self):
        env = EnvironmentResolver().resolve("dev")
        assert env.name == Mode.DEV
        assert env.compose_file == "docker/compose.development.yaml"
        assert env.env_file == ".env"

    def test_resolve_prod(self):
        env = EnvironmentResolver().resolve("prod")
        assert env.name == Mode.PROD
        assert env.compose_file == "docker/compose.production.yaml"
        assert env.env_file == ".env"

    @pytest.mark.parametrize("mode", [None, "", "   "])
    def test_unset_mode_defaults_to_dev(self, mode):
        assert EnvironmentResolver().resolve(mode).name == Mode.DEV

    @pytest.mark.parametrize("mode", ["PROD", " prod ", "Prod"])
    def test_mode_is_case_insensitive(self, mode):
        assert EnvironmentResolver().resolve(mode).name == Mode.PROD

    @pytest.mark.parametrize("mode", ["staging", "production", "d", "dev prod"])
    def test_unknown_mode(self, mode):
        with pytest.raises(UnknownMode) as exc:
            EnvironmentResolver().resolve(mode)
        assert exc.value.mode == mode
        assert exc.value.valid == ["dev", "prod"]

    def test_unknown_mode_is_value_error(self):
        with pytest.raises(ValueError):
            EnvironmentResolver().resolve("qa")

    def test_resolution_is_repeatable(self):
        resolver = EnvironmentResolver()
        assert resolver.resolve("prod") == resolver.resolve("prod")

    def test_environment_is_immutable(self):
        env = EnvironmentResolver().resolve("dev")
        with pytest.raises(Exception):
            env.compose_file = "other.yaml"

    def test_configured_paths(self):
        config = ProjectConfig(
            env_file="config/shared.env",
            environments={
                Mode.PROD: EnvironmentConfig(
                    compose_file="deploy/prod.yaml",
                    health_endpoints={"gateway": "https://example.test/health"},
                ),
            },
        )
        resolver = EnvironmentResolver(config)

        prod = resolver.resolve("prod")
        assert prod.compose_file == "deploy/prod.yaml"
        assert prod.env_file == "config/shared.env"
        assert prod.health_endpoints == {"gateway": "https://example.test/health"}

        # dev keeps its default compose file
        assert resolver.resolve("dev").compose_file == "docker/compose.development.yaml"

    def test_per_environment_env_file(self):
        config = ProjectConfig(environments={
            Mode.DEV: EnvironmentConfig(compose_file="dev.yaml", env_file=".env.dev"),
        })
        assert EnvironmentResolver(config).resolve("dev").env_file == ".env.dev"

    def test_resolve_all(self):
        names = [env.name for env in EnvironmentResolver().resolve_all()]
        assert names == [Mode.DEV, Mode.PROD]

    def test_default_health_endpoints(self):
        env = EnvironmentResolver().resolve("dev")
        assert env.health_endpoints == {
            "gateway": "http://localhost:5921/health",
            "backend": "http://localhost:5921/api/health",
        }
