"""Claude (Anthropic) Generator"""

import os

from ai_commit.generators.base import Generator, GeneratorError

SYSTEM_PROMPT = (
    "You are a senior software engineer who writes precise, informative git "
    "commit messages. The diff shows WHAT changed; you explain WHY."
)


class ClaudeGenerator(Generator):
    """Claude API generator. Needs generators.claude.api_key or ANTHROPIC_API_KEY."""

    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    MAX_TOKENS = 1000
    TEMPERATURE = 0.4

    def __init__(self, config: dict, runner=None):
        super().__init__(config, runner)
        self.api_key = config.get("api_key") or os.environ.get("ANTHROPIC_API_KEY")
        self.model = config.get("model") or self.DEFAULT_MODEL

        if not self.api_key:
            raise GeneratorError(
                "No API key found. Set it with:\n"
                "  ai-commit config set generators.claude.api_key <key> --global\n"
                "or export ANTHROPIC_API_KEY='your-key-here'"
            )

        try:
            from anthropic import Anthropic
            self._client = Anthropic(api_key=self.api_key)
        except ImportError:
            raise GeneratorError(
                "Anthropic SDK not installed. Run:\n"
                "  pip install anthropic"
            )

    @property
    def name(self) -> str:
        return f"Claude ({self.model})"

    def generate(self, prompt: str) -> str:
        from anthropic import APIError, AuthenticationError

        try:
            response = self._client.messages.create(
                model=self.model,
                max_tokens=self.config.get("max_tokens") or self.MAX_TOKENS,
                temperature=self.config.get("temperature", self.TEMPERATURE),
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
            )
        except AuthenticationError:
            raise GeneratorError("Invalid API key. Check generators.claude.api_key or ANTHROPIC_API_KEY.")
        except APIError as e:
            raise GeneratorError(f"Claude API error: {e.message}")

        for block in response.content:
            if block.type == "text":
                return block.text.strip()
        raise GeneratorError("Claude returned no text content.")
