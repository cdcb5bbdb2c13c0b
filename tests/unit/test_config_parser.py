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
Unit tests for project configuration loading.
"""
import pytest

from stackctl.exceptions import ConfigError
from stackctl.MODELS.environment import Mode
from stackctl.MODELS.project_config import ProjectConfig
from stackctl.PARSERS.config_parser import ConfigParser


class TestConfigParser:
    """Tests for ConfigParser."""

    def test_defaults_without_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = ConfigParser(context={}).load()
        assert config == ProjectConfig()
        assert config.runtime == ["docker", "compose"]
        assert config.default_service == "backend"
        assert config.backup_dir == "backups"
        assert config.database.service == "mongo"

    def test_picks_up_default_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "stackctl.yaml").write_text("default_service: gateway\n")
        assert ConfigParser(context={}).load().default_service == "gateway"

    def test_env_var_location(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("backup_dir: /srv/backups\n")
        config = ConfigParser(context={"STACKCTL_CONFIG": str(path)}).load()
        assert config.backup_dir == "/srv/backups"

    def test_explicit_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            ConfigParser(context={}).load(str(tmp_path / "nope.yaml"))

    def test_partial_environments_keep_defaults(self):
        config = ConfigParser(context={}).parse_from_string("""
environments:
  prod:
    compose_file: deploy/prod.yaml
    health_endpoints:
      gateway: https://shop.example.test/health
""")
        assert config.environments[Mode.PROD].compose_file == "deploy/prod.yaml"
        assert config.environments[Mode.DEV].compose_file == "docker/compose.development.yaml"

    def test_interpolation(self):
        config = ConfigParser(context={"GATEWAY_PORT": "8080"}).parse_from_string("""
environments:
  dev:
    compose_file: docker/compose.development.yaml
    health_endpoints:
      gateway: http://localhost:${GATEWAY_PORT:-5921}/health
      backend: http://localhost:${UNSET_PORT}/api/health
""")
        endpoints = config.environments[Mode.DEV].health_endpoints
        assert endpoints["gateway"] == "http://localhost:8080/health"
        assert endpoints["backend"] == "http://localhost:/api/health"

    @pytest.mark.parametrize("content", [
        "- just\n- a list\n",
        "runtime: []\n",
        "environments:\n  staging:\n    compose_file: x.yaml\n",
        "health_timeout: soon\n",
        "database:\n  password_key: 'PASS; rm -rf /'\n",
        "database:\n  shell: 'mongosh && reboot'\n",
        "key: [unclosed\n",
    ])
    def test_invalid(self, content):
        with pytest.raises(ConfigError):
            ConfigParser(context={}).parse_from_string(content)

    def test_empty_file_is_defaults(self):
        assert ConfigParser(context={}).parse_from_string("") == ProjectConfig()
