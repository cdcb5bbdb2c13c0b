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
Unit tests for the command dispatcher.
"""
import io

import pytest

from stackctl.exceptions import RuntimeUnavailable
from stackctl.MODELS.invocation import Invocation, Verb
from stackctl.RUNNERS.command_builder import CommandBuilder
from stackctl.RUNNERS.command_dispatcher import CommandDispatcher


class TestCommandDispatcher:
    """Tests for CommandDispatcher."""

    def test_logs_scenario(self, dispatcher, fake_popen, dev_env):
        """Following gateway logs in dev spawns exactly one runtime process."""
        invocation = Invocation(verb=Verb.LOGS, environment=dev_env, service="gateway")
        assert dispatcher.dispatch(invocation) == 0

        assert fake_popen.commands == [[
            "docker", "compose", "-f", "docker/compose.development.yaml",
            "--env-file", ".env", "logs", "-f", "gateway",
        ]]
        _, kwargs = fake_popen.calls[0]
        assert kwargs["shell"] is False
        # inherited streams
        assert kwargs["stdout"] is None
        assert "stdin" not in kwargs and "stderr" not in kwargs

    @pytest.mark.parametrize("code", [1, 2, 125, 130])
    def test_nonzero_exit_is_returned(self, popen_factory, dev_env, code):
        popen = popen_factory(returncode=code)
        dispatcher = CommandDispatcher(popen=popen, which=lambda b: "/usr/bin/docker")
        assert dispatcher.dispatch(Invocation(verb=Verb.UP, environment=dev_env)) == code
        assert len(popen.calls) == 1

    def test_missing_runtime(self, fake_popen, dev_env):
        dispatcher = CommandDispatcher(popen=fake_popen, which=lambda b: None)
        with pytest.raises(RuntimeUnavailable) as exc:
            dispatcher.dispatch(Invocation(verb=Verb.PS, environment=dev_env))
        assert exc.value.binary == "docker"
        assert fake_popen.calls == []

    def test_unexecutable_runtime(self, dev_env):
        def popen(command, **kwargs):
            raise PermissionError(13, "Permission denied")

        dispatcher = CommandDispatcher(popen=popen, which=lambda b: "/usr/bin/docker")
        with pytest.raises(RuntimeUnavailable):
            dispatcher.dispatch(Invocation(verb=Verb.PS, environment=dev_env))

    def test_runtime_lookup_uses_first_token(self, fake_popen, dev_env):
        looked_up = []

        def which(binary):
            looked_up.append(binary)
            return "/usr/local/bin/" + binary

        dispatcher = CommandDispatcher(CommandBuilder(runtime=["podman", "compose"]),
                                       popen=fake_popen, which=which)
        dispatcher.dispatch(Invocation(verb=Verb.PS, environment=dev_env))
        assert looked_up == ["podman"]
        assert fake_popen.commands[0][:2] == ["podman", "compose"]

    def test_child_env_is_injected(self, dispatcher, fake_popen, dev_env):
        invocation = Invocation(verb=Verb.EXEC, environment=dev_env, service="mongo",
                                child_env={"DB_PASSWORD": "hunter2"})
        dispatcher.dispatch(invocation)
        command, kwargs = fake_popen.calls[0]
        assert kwargs["env"]["DB_PASSWORD"] == "hunter2"
        assert kwargs["env"]["PATH"] == "/usr/bin"
        assert "hunter2" not in command

    def test_stdout_redirect(self, popen_factory, dev_env):
        popen = popen_factory(stdout_data=b"archive-bytes")
        dispatcher = CommandDispatcher(popen=popen, which=lambda b: "/usr/bin/docker")
        sink = io.BytesIO()
        dispatcher.dispatch(Invocation(verb=Verb.PS, environment=dev_env), stdout=sink)
        assert sink.getvalue() == b"archive-bytes"

    def test_interrupt_waits_for_child(self, popen_factory, dev_env):
        popen = popen_factory(returncode=-2, interrupt=True)
        dispatcher = CommandDispatcher(popen=popen, which=lambda b: "/usr/bin/docker")
        code = dispatcher.dispatch(Invocation(verb=Verb.LOGS, environment=dev_env, service="backend"))
        assert code == -2
        assert popen.processes[0].wait_calls == 2
        assert len(popen.calls) == 1

    def test_repeated_interrupts_still_reap_child(self, popen_factory, dev_env):
        popen = popen_factory(returncode=-2, interrupt=3)
        dispatcher = CommandDispatcher(popen=popen, which=lambda b: "/usr/bin/docker")
        code = dispatcher.dispatch(Invocation(verb=Verb.LOGS, environment=dev_env, service="backend"))
        assert code == -2
        assert popen.processes[0].wait_calls == 4

    def test_one_process_per_dispatch(self, dispatcher, fake_popen, dev_env):
        for _ in range(3):
            dispatcher.dispatch(Invocation(verb=Verb.PS, environment=dev_env))
        assert len(fake_popen.calls) == 3
