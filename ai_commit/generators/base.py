"""Generator Base Class and Shared Helpers"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Optional

from ai_commit.process import Command, OutputSink, ProcessResult, ProcessRunner


class GeneratorError(Exception):
    """Raised when a generator is misconfigured or its backend fails."""
    pass


def sanitize_json(text: str) -> str:
    """Cut the first {...} block out of a model reply and undo common escaping noise."""
    match = re.search(r'\{.*\}', text, re.DOTALL)
    if not match:
        return ""
    return match.group(0).replace("\\'", "'").replace("\r\n", "").replace("\n", "")


class Generator(ABC):
    """Turns a prompt into commit message text.

    config is the generator's own section of the config tree
    (generators.<name>); runner executes any external tools it needs.
    """

    def __init__(self, config: dict, runner: Optional[ProcessRunner] = None):
        self.config = config
        self.runner = runner or ProcessRunner()

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def generate(self, prompt: str) -> str:
        pass

    def run(
        self,
        command: Command,
        error_message: Optional[str] = None,
        output_sink: Optional[OutputSink] = None,
        verbosity: int = logging.DEBUG,
        **kwargs,
    ) -> ProcessResult:
        return self.runner.run(command, error_message, output_sink, verbosity, **kwargs)

    def must_run(
        self,
        command: Command,
        error_message: Optional[str] = None,
        output_sink: Optional[OutputSink] = None,
        verbosity: int = logging.DEBUG,
        **kwargs,
    ) -> ProcessResult:
        return self.runner.must_run(command, error_message, output_sink, verbosity, **kwargs)

    def default_output_sink(self) -> OutputSink:
        return self.runner.default_output_sink()

    sanitize_json = staticmethod(sanitize_json)
