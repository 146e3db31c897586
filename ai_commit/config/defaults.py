"""Built-in default configuration.

Seeded into the global config file on first use and used as the base
layer when the commit command resolves its settings.
"""

DEFAULT_PROMPT = """\
You are an expert at writing git commit messages.
Write one conventional commit message for the staged changes below.

Rules:
- Subject: type(scope): imperative summary, at most 72 characters
- Body: short bullet list explaining what changed and why
- Reply with a single JSON object and nothing else:
  {"subject": "...", "body": "..."}

<diff>
{diff}
</diff>"""

DEFAULTS = {
    "generator": "ollama",
    "generators": {
        "ollama": {
            "driver": "ollama",
            "host": "http://localhost:11434",
            "model": "mistral:7b",
            "timeout": 300,
        },
        "claude": {
            "driver": "claude",
            "api_key": None,
            "model": "claude-sonnet-4-20250514",
            "max_tokens": 1000,
            "temperature": 0.4,
        },
        "command": {
            "driver": "command",
            "command": ["ollama", "run", "mistral:7b"],
            "timeout": None,
        },
    },
    "diff_options": [
        ":(exclude)package-lock.json",
        ":(exclude)yarn.lock",
        ":(exclude)pnpm-lock.yaml",
        ":(exclude)poetry.lock",
        ":(exclude)composer.lock",
        ":(exclude)Cargo.lock",
        ":(exclude)*.min.js",
        ":(exclude)*.min.css",
    ],
    "prompt": DEFAULT_PROMPT,
    "no_verify": False,
}
