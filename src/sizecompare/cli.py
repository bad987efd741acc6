import argparse
import logging
import os
import sys
import textwrap
from functools import wraps

import httpx

from . import Workspace, SizeCompareError, ConfigurationError
from .workspace import LOG_FORMAT

logger = logging.getLogger(__name__)


def needs_workspace(func):
    """Decorator for commands that need the workspace to be loaded.

    The decorated function will receive (workspace, args).
    The wrapper function takes (load_workspace_fn, args), loads the workspace and closes it afterwards.
    """
    @wraps(func)
    def wrapper(load_workspace_fn, args):
        with load_workspace_fn() as workspace:
            return func(workspace, args)
    return wrapper


def sizecompare_main():
    parser = argparse.ArgumentParser(
        prog='sizecompare',
        description='Track build artifact sizes per commit and report size changes on pull requests.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent('''
            Examples:
              sizecompare measure --sha $GITHUB_SHA --files 'dist/**'
              sizecompare diff BASE_SHA HEAD_SHA
              sizecompare compare --files 'dist/**' --key-pattern '(.*)\\.[0-9a-f]{8}(\\.js)$'
            ''').strip()
    )
    parser.add_argument(
        '--root',
        metavar='PATH',
        help='Workspace root that file patterns are resolved against. If not provided, uses GITHUB_WORKSPACE '
             'environment variable or the current directory.')
    parser.add_argument(
        '--store',
        metavar='PATH',
        help='Snapshot store directory. If not provided, uses store.path from settings or .sizecompare/store.')
    parser.add_argument(
        '--files',
        metavar='PATTERNS',
        help='Newline-separated glob patterns selecting the files to measure. Lines starting with "!" exclude. '
             'If not provided, uses files from settings.')
    parser.add_argument(
        '--key-pattern',
        metavar='REGEX',
        help='Regular expression with capture groups deriving the correlation key from each file path. '
             'If not provided, uses key_pattern from settings; without one files are matched by name.')
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose output for detailed information during operations')
    parser.add_argument(
        '--log-file',
        metavar='PATH',
        help='Path to log file for operation logging. If not provided, uses logging.path from settings or '
             'standard error.')
    parser.add_argument(
        '--log-level',
        metavar='LEVEL',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Defaults to INFO when --log-file is provided.')
    subparsers = parser.add_subparsers(
        dest='command',
        title='Commands',
        description='Available commands',
        help='Use "sizecompare COMMAND --help" for command-specific help',
        required=True
    )

    parser_measure = subparsers.add_parser(
        'measure',
        help='Measure the configured files and store the snapshot for a commit',
        description='Computes raw and gzip sizes of the files selected by the patterns and stores them as the '
                    'snapshot of the commit. A commit has at most one snapshot.')
    parser_measure.add_argument(
        '--sha',
        metavar='SHA',
        help='Commit to store the snapshot under (default: GITHUB_SHA environment variable)')
    parser_measure.set_defaults(method=_measure)

    parser_diff = subparsers.add_parser(
        'diff',
        help='Print the size report comparing two stored commits',
        description='Loads the snapshots of both commits and prints the Markdown report. A commit without a '
                    'snapshot is treated as having no files.')
    parser_diff.add_argument('base_sha', metavar='BASE', help='Base commit')
    parser_diff.add_argument('head_sha', metavar='HEAD', help='Head commit')
    parser_diff.add_argument(
        '--repository-url',
        metavar='URL',
        help='Web URL of the repository; adds a comparison link to the report')
    parser_diff.set_defaults(method=_diff)

    parser_compare = subparsers.add_parser(
        'compare',
        help='Publish size reports on open pull requests',
        description='On push events measures and stores the current commit first. Then, for every open '
                    'non-draft pull request whose base or head tip is the current commit, compares base and '
                    'head and creates or updates the report comment.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent('''
            Environment:
              GITHUB_TOKEN, GITHUB_REPOSITORY, GITHUB_SHA, GITHUB_EVENT_NAME,
              GITHUB_API_URL, GITHUB_SERVER_URL provide defaults for the options below.
            ''').strip())
    parser_compare.add_argument('--token', metavar='TOKEN', help='GitHub token')
    parser_compare.add_argument('--repository', metavar='OWNER/NAME', help='GitHub repository')
    parser_compare.add_argument('--sha', metavar='SHA', help='Commit the workflow runs for')
    parser_compare.add_argument('--event-name', metavar='EVENT', help='Triggering event name')
    parser_compare.set_defaults(method=_compare)

    parser_inspect = subparsers.add_parser(
        'inspect',
        help='List stored snapshots',
        description='Displays one line per snapshot in the store with file count, sizes and save time.')
    parser_inspect.set_defaults(method=_inspect)

    args = parser.parse_args()

    if args.log_file:
        log_level = args.log_level
        if log_level is None:
            log_level = 'INFO'

        logging.basicConfig(
            filename=args.log_file,
            level=getattr(logging, log_level),
            format=LOG_FORMAT
        )
    else:
        log_level = args.log_level
        if log_level is None:
            log_level = 'INFO' if args.verbose else 'WARNING'

        logging.basicConfig(
            level=getattr(logging, log_level),
            format=LOG_FORMAT
        )

    root = args.root
    if root is None:
        root = os.environ.get('GITHUB_WORKSPACE') or os.getcwd()

    def load_workspace():
        workspace = Workspace(root, files=args.files, key_pattern=args.key_pattern, store_path=args.store)
        if not args.log_file:
            workspace.configure_logging_from_settings()
        return workspace

    try:
        args.method(load_workspace, args)
    except (SizeCompareError, httpx.HTTPError, OSError) as e:
        logger.error(f"{type(e).__name__}: {e}")
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def _require(value: str | None, environment_variable: str, option: str) -> str:
    if value is None:
        value = os.environ.get(environment_variable)
    if not value:
        raise ConfigurationError(f"{option} is required (or set {environment_variable})")
    return value


@needs_workspace
def _measure(workspace: Workspace, args):
    sha = _require(args.sha, 'GITHUB_SHA', '--sha')
    if not workspace.patterns:
        logger.info("No file patterns configured, skipping")
        return
    snapshot = workspace.measure(sha)
    total = snapshot.total()
    print(f"{sha}: {len(snapshot)} files, {total.size} bytes, {total.compressed_size} bytes gzip")


@needs_workspace
def _diff(workspace: Workspace, args):
    print(workspace.diff(args.base_sha, args.head_sha, args.repository_url))


@needs_workspace
def _compare(workspace: Workspace, args):
    if not workspace.patterns:
        logger.info("No file patterns configured, skipping")
        return

    sha = _require(args.sha, 'GITHUB_SHA', '--sha')
    event_name = _require(args.event_name, 'GITHUB_EVENT_NAME', '--event-name')
    token = _require(args.token, 'GITHUB_TOKEN', '--token')
    repository = _require(args.repository, 'GITHUB_REPOSITORY', '--repository')

    written = workspace.compare(
        sha, event_name, token, repository,
        api_url=os.environ.get('GITHUB_API_URL') or 'https://api.github.com',
        server_url=os.environ.get('GITHUB_SERVER_URL') or 'https://github.com')
    logger.info(f"Reports written: {written}")


@needs_workspace
def _inspect(workspace: Workspace, args):
    for line in workspace.inspect():
        print(line)


if __name__ == '__main__':
    sizecompare_main()
