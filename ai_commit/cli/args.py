"""CLI Argument Parsing"""

import argparse
import argcomplete

from ai_commit import __version__

CONFIG_ACTIONS = ['set', 'get', 'unset', 'list', 'edit']


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='ai-commit',
        description='Generate commit messages for staged changes with AI',
        epilog='Example: ai-commit commit --dry-run'
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('-v', '--verbose', action='count', default=0, help='Log more (-v process output, -vv every command run)')

    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')
    subparsers.required = True

    config = subparsers.add_parser('config', help='Manage config options')
    # Not restricted with choices: unknown actions are reported by the command itself
    config.add_argument('action', help=f"The action name ({', '.join(CONFIG_ACTIONS)})")
    config.add_argument('key', nargs='?', help='The key of the config option, e.g. generators.ollama.model')
    config.add_argument('value', nargs='?', help='The value to set; parsed as JSON when possible')
    config.add_argument('-g', '--global', dest='use_global', action='store_true', help='Apply to the global config file')
    config.add_argument('-f', '--file', metavar='PATH', help='Apply to the specified config file')
    config.add_argument('-e', '--editor', metavar='NAME', help='Editor to use for the edit action')

    commit = subparsers.add_parser('commit', help='Generate a commit message for the staged changes')
    commit.add_argument('-g', '--generator', metavar='NAME', help='Generator to use (default: config key "generator")')
    commit.add_argument('--dry-run', action='store_true', help='Print the message only, do not commit')
    commit.add_argument('--no-verify', action='store_true', default=None, help='Skip git commit hooks')
    commit.add_argument('--diff-option', dest='diff_options', action='append', metavar='OPT',
                        help='Extra git diff option or pathspec (repeatable)')

    argcomplete.autocomplete(parser)
    return parser


def parse_args(argv=None) -> argparse.Namespace:
    return build_parser().parse_args(argv)
