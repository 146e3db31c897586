"""Command Generator - pipe the prompt into any CLI that prints a reply."""

from ai_commit.generators.base import Generator, GeneratorError
from ai_commit.process import OutputStream, ProcessError, command_line


class CommandGenerator(Generator):
    """Runs generators.<name>.command with the prompt on stdin; stdout is the reply.

    stderr (progress spinners and the like) is routed through the default
    output sink so it lands in the log instead of the terminal.
    """

    def __init__(self, config: dict, runner=None):
        super().__init__(config, runner)
        self.command = config.get("command")
        if not self.command:
            raise GeneratorError("No command configured for the command generator.")
        if not isinstance(self.command, (str, list)):
            raise GeneratorError("The generator command must be a string or a list of arguments.")
        self.timeout = config.get("timeout")

    @property
    def name(self) -> str:
        return command_line(self.command)

    def generate(self, prompt: str) -> str:
        log_sink = self.default_output_sink()

        def sink(stream, data):
            if stream is OutputStream.ERR:
                log_sink(stream, data)

        try:
            result = self.must_run(
                self.command,
                f"The generator command failed: {self.name}",
                sink,
                input=prompt,
                timeout=self.timeout,
            )
        except ProcessError as e:
            raise GeneratorError(str(e)) from e
        return result.output.strip()
