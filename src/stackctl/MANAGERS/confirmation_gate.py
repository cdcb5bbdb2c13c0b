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
Confirmation gate for destructive operations.

A gate is single-shot: it asks once, moves from PROMPTING to either
PROCEEDING or CANCELLED, and never asks again.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

import click

from ..MODELS.invocation import ConfirmationPrompt

logger = logging.getLogger(__name__)

# Returns the operator's raw answer, or None on EOF/interrupt.
AskFunction = Callable[[str], Optional[str]]


class GateState(str, Enum):
    """States of a confirmation gate."""

    PROMPTING = "prompting"
    PROCEEDING = "proceeding"
    CANCELLED = "cancelled"


@dataclass
class GateResult:
    """Outcome of a guarded action."""

    state: GateState
    exit_code: Optional[int] = None

    @property
    def cancelled(self) -> bool:
        return self.state == GateState.CANCELLED


def is_affirmative(answer: Optional[str]) -> bool:
    """
    Only a lone 'y' or 'Y' counts as consent.
    """
    if answer is None:
        return False
    return answer.strip() in ("y", "Y")


def terminal_ask(question: str) -> Optional[str]:
    """
    Reads an answer from the terminal. EOF and Ctrl+C read as no answer.
    """
    try:
        return click.prompt(question, default="", show_default=False, prompt_suffix=" ")
    except click.Abort:
        click.echo("")
        return None


class ConfirmationGate:
    """
    Guards a single destructive action behind an explicit operator yes.
    """

    def __init__(self, ask: AskFunction = terminal_ask):
        """
        :param ask: Callable that shows a question and returns the raw answer.
        """
        self.ask = ask
        self.state = GateState.PROMPTING

    def confirm(self, prompt: ConfirmationPrompt) -> bool:
        """
        Asks the question and settles the gate.

        :return: True when the operator answered yes.
        :raises RuntimeError: If the gate has already been used.
        """
        if self.state != GateState.PROMPTING:
            raise RuntimeError(f"Confirmation gate already {self.state.value}")

        if prompt.warning:
            click.echo(prompt.warning)
        answer = self.ask(prompt.render())

        if is_affirmative(answer):
            self.state = GateState.PROCEEDING
        else:
            self.state = GateState.CANCELLED
        logger.debug("Confirmation for %r: %s", prompt.message, self.state.value)
        return self.state == GateState.PROCEEDING

    def run(self, prompt: ConfirmationPrompt, action: Callable[[], int]) -> GateResult:
        """
        Runs the action exactly once if confirmed, otherwise not at all.

        :param prompt: The question to ask.
        :param action: Zero-argument callable returning an exit code.
        :return: The gate's final state and the action's exit code, if it ran.
        """
        if not self.confirm(prompt):
            return GateResult(state=GateState.CANCELLED)
        return GateResult(state=GateState.PROCEEDING, exit_code=action())
