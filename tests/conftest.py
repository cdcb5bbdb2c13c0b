"""
Shared fixtures: a recording stand-in for subprocess.Popen and resolved
environments, so no test ever starts a real container runtime.
"""
import pytest

from stackctl.MANAGERS.environment_manager import EnvironmentResolver
from stackctl.RUNNERS.command_builder import CommandBuilder
from stackctl.RUNNERS.command_dispatcher import CommandDispatcher


class FakeProcess:
    def __init__(self, returncode=0, interrupt=False):
        self.returncode = returncode
        self.interrupt = interrupt
        self.wait_calls = 0

    def wait(self):
        self.wait_calls += 1
        if self.wait_calls <= int(self.interrupt):
            raise KeyboardInterrupt
        return self.returncode


class FakePopen:
    """Records every spawn instead of running anything."""

    def __init__(self, returncode=0, stdout_data=b"", interrupt=False):
        self.returncode = returncode
        self.stdout_data = stdout_data
        self.interrupt = interrupt
        self.calls = []
        self.processes = []

    def __call__(self, command, **kwargs):
        self.calls.append((list(command), kwargs))
        stdout = kwargs.get("stdout")
        if stdout is not None and self.stdout_data:
            stdout.write(self.stdout_data)
        process = FakeProcess(self.returncode, self.interrupt)
        self.processes.append(process)
        return process

    @property
    def commands(self):
        return [command for command, _ in self.calls]


@pytest.fixture
def fake_popen():
    return FakePopen()


@pytest.fixture
def dispatcher(fake_popen):
    return CommandDispatcher(
        CommandBuilder(),
        popen=fake_popen,
        which=lambda binary: f"/usr/bin/{binary}",
        base_env={"PATH": "/usr/bin"},
    )


@pytest.fixture
def dev_env():
    return EnvironmentResolver().resolve("dev")


@pytest.fixture
def prod_env():
    return EnvironmentResolver().resolve("prod")


@pytest.fixture
def popen_factory():
    return FakePopen
