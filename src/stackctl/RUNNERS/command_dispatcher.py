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
Execution of runtime commands with inherited standard streams.
"""
import logging
import os
import shutil
import subprocess
from typing import IO, Callable, Dict, Optional

from ..exceptions import RuntimeUnavailable
from ..MODELS.invocation import Invocation
from .command_builder import CommandBuilder

logger = logging.getLogger(__name__)


class CommandDispatcher:
    """
    Runs one invocation as a child process and reports its exit code.

    The child shares the caller's terminal, so interactive sessions and log
    following work unchanged, and a Ctrl+C reaches the child directly.
    Nothing is retried.
    """
    def __init__(self,
                 builder: Optional[CommandBuilder] = None,
                 popen: Callable[..., subprocess.Popen] = subprocess.Popen,
                 which: Callable[[str], Optional[str]] = shutil.which,
                 base_env: Optional[Dict[str, str]] = None):
        """
        Args:
            builder (Optional[CommandBuilder]): Translates invocations to argv.
            popen (Callable): Process factory, subprocess.Popen by default.
            which (Callable): Executable lookup, shutil.which by default.
            base_env (Optional[Dict[str, str]]): Environment for children. Defaults to os.environ.
        """
        self.builder = builder or CommandBuilder()
        self.popen = popen
        self.which = which
        self.base_env = base_env

    def check_runtime(self) -> str:
        """
        Locates the runtime binary.

        Returns:
            str: Absolute path of the binary.

        Raises:
            RuntimeUnavailable: If it is not on PATH.
        """
        binary = self.builder.runtime[0]
        path = self.which(binary)
        if not path:
            raise RuntimeUnavailable(binary)
        return path

    def dispatch(self, invocation: Invocation, stdout: Optional[IO] = None) -> int:
        """
        Runs the invocation to completion.

        Args:
            invocation (Invocation): The command to run.
            stdout (Optional[IO]): Redirect the child's stdout here instead of inheriting it.

        Returns:
            int: The child's exit code, unchanged.

        Raises:
            RuntimeUnavailable: If the runtime binary cannot be executed.
        """
        self.check_runtime()
        command = self.builder.build(invocation)

        env = dict(self.base_env if self.base_env is not None else os.environ)
        env.update(invocation.child_env)

        logger.debug("Running: %s", " ".join(command))
        if invocation.child_env:
            logger.debug("Injected variables: %s", ", ".join(sorted(invocation.child_env)))

        try:
            process = self.popen(command, env=env, stdout=stdout, shell=False)
        except OSError as e:
            raise RuntimeUnavailable(command[0], str(e)) from e

        returncode = None
        while returncode is None:
            try:
                returncode = process.wait()
            except KeyboardInterrupt:
                # the child got the same SIGINT; keep waiting until it exits
                continue

        logger.debug("Exited with %s", returncode)
        return returncode
