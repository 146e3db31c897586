"""The `commit` command: staged diff -> generator -> commit message."""

import json
import logging
from dataclasses import dataclass

from ai_commit.config import ConfigStore
from ai_commit.generators import GeneratorError, get_generator, sanitize_json
from ai_commit.git import GitRepository
from ai_commit.output import bold, dim, info, print_error, print_success
from ai_commit.process import ProcessRunner

LOG = logging.getLogger(__name__)

DIFF_MARKER = "{diff}"


@dataclass
class CommitMessage:
    subject: str
    body: str = ""

    def __str__(self) -> str:
        if not self.body:
            return self.subject
        return f"{self.subject}\n\n{self.body}"


def build_prompt(template: str, diff: str) -> str:
    """Insert the diff at the {diff} marker, or append it when there is none."""
    if DIFF_MARKER in template:
        return template.replace(DIFF_MARKER, diff)
    return f"{template}\n\n{diff}"


def parse_message(reply: str) -> CommitMessage:
    """Read {"subject": ..., "body": ...} from a reply, else treat it as plain text."""
    try:
        data = json.loads(sanitize_json(reply))
    except json.JSONDecodeError:
        data = None

    if isinstance(data, dict) and isinstance(data.get("subject"), str) and data["subject"].strip():
        body = data.get("body") or ""
        if isinstance(body, list):
            body = "\n".join(f"- {line}" for line in body)
        return CommitMessage(subject=data["subject"].strip(), body=str(body).strip())

    lines = reply.strip().split('\n')
    return CommitMessage(subject=lines[0].strip(), body='\n'.join(lines[1:]).strip())


class CommitCommand:
    """Generates a message for the staged changes and optionally commits it."""

    def __init__(self, store: ConfigStore, runner: ProcessRunner, repository: GitRepository | None = None):
        self.store = store
        self.runner = runner
        self.repository = repository or GitRepository(runner)

    def handle(self, args) -> int:
        self.repository.ensure_repository()

        options = list(self.store.get("diff_options") or [])
        options += args.diff_options or []
        diff = self.repository.staged_diff(options)
        if not diff.strip():
            print_error("No staged changes. Run 'git add' first.")
            return 1

        generator = get_generator(args.generator, self.store, self.runner)
        print(f"Generating commit message using {info(generator.name)}...")
        prompt = build_prompt(self.store.get("prompt") or DIFF_MARKER, diff)
        reply = generator.generate(prompt)
        LOG.debug("Generator reply: %s", reply)

        message = parse_message(reply)
        if not message.subject:
            raise GeneratorError("The generator returned an empty commit message.")

        print(f"\n{bold(message.subject)}")
        if message.body:
            print(f"\n{message.body}")
        print()

        if args.dry_run:
            print(dim("Dry run, nothing committed."))
            return 0

        no_verify = args.no_verify if args.no_verify is not None else bool(self.store.get("no_verify"))
        self.repository.commit(str(message), no_verify=no_verify)
        print_success("Committed.")
        return 0
