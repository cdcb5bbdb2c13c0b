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
Translation of invocations into runtime command lines.
"""
from typing import List, Sequence

from ..MODELS.invocation import Invocation, Verb


class CommandBuilder:
    """
    Builds the argv for an invocation against the compose runtime.

    Layout: runtime, environment selection, verb tokens, service, then the
    caller's passthrough arguments verbatim.
    """
    def __init__(self, runtime: Sequence[str] = ("docker", "compose"),
                 shell_command: Sequence[str] = ("sh",)):
        """
        :param runtime: Base command of the orchestration runtime.
        :param shell_command: Command started by the shell verb.
        """
        self.runtime = list(runtime)
        self.shell_command = list(shell_command)

    def environment_args(self, invocation: Invocation) -> List[str]:
        env = invocation.environment
        return ["-f", env.compose_file, "--env-file", env.env_file]

    def verb_args(self, invocation: Invocation) -> List[str]:
        """
        Fixed arguments for the verb, including the service where it applies.
        """
        verb = invocation.verb
        service = [invocation.service] if invocation.service else []

        if verb == Verb.UP:
            return ["up", "-d"]
        if verb == Verb.DOWN:
            return ["down"]
        if verb == Verb.BUILD:
            return ["build"] + service
        if verb == Verb.LOGS:
            return ["logs", "-f"] + service
        if verb == Verb.RESTART:
            return ["restart"] + service
        if verb == Verb.SHELL:
            return ["exec"] + service + self.shell_command
        if verb == Verb.PS:
            return ["ps"]
        if verb == Verb.EXEC:
            options = [] if invocation.interactive else ["-T"]
            # names only: the runtime copies values from its own environment
            for key in sorted(invocation.child_env):
                options += ["-e", key]
            return ["exec"] + options + list(invocation.exec_options) + service
        raise ValueError(f"Unsupported verb: {verb}")

    def build(self, invocation: Invocation) -> List[str]:
        """
        Full argv for the invocation.
        """
        return (
            self.runtime
            + self.environment_args(invocation)
            + self.verb_args(invocation)
            + list(invocation.extra_args)
        )
