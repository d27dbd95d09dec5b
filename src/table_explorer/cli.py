"""CLI entry point for pretty-table-explorer."""

import argparse
import logging
import sys
from pathlib import Path

import table_explorer.io.logging_setup
import table_explorer.settings
from table_explorer.app.workspace import Tab, ViewMode, Workspace
from table_explorer.core.parser import InvalidInputFormat, load_table
from table_explorer.core.table_store import TabularStore
from table_explorer.io.stdin_source import open_piped_stdin, stdin_is_piped
from table_explorer.pipeline.ingestor import StreamingIngestor
from table_explorer.tui.app import TableExplorerApp

logger = logging.getLogger(__name__)

INVALID_INPUT_MESSAGE = "Error: Invalid or empty input. Expected psql table format."


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pte",
        description="Interactive viewer for psql-style table output",
        epilog="Example: psql -c 'SELECT * FROM users' | pte",
    )
    parser.add_argument(
        "--file",
        type=str,
        default=None,
        help="Read a saved psql table from PATH instead of stdin",
    )
    parser.add_argument(
        "--name",
        type=str,
        default=None,
        help="Tab name (default: file name, or 'stdin')",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level (default: PTE_LOG_LEVEL or INFO)",
    )
    return parser


def _run_file(path: Path, name: str, config) -> int:
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        print(f"Error: cannot read {path}: {e.strerror or e}", file=sys.stderr)
        return 1
    try:
        table = load_table(text)
    except InvalidInputFormat:
        logger.warning("invalid input in %s", path)
        print(INVALID_INPUT_MESSAGE, file=sys.stderr)
        return 1

    logger.info("loaded %s: %d columns, %d rows", path, table.column_count, table.row_count)
    workspace = Workspace()
    workspace.add_tab(Tab(name, TabularStore.from_table(table), ViewMode.STATIC))
    TableExplorerApp(workspace, config=config).run()
    return 0


def _run_stdin(name: str, config) -> int:
    try:
        stream = open_piped_stdin()
    except OSError as e:
        print(f"Error: no terminal available for keyboard input: {e}", file=sys.stderr)
        return 1
    if stream is None:
        return 1

    try:
        ingestor = StreamingIngestor.start(stream, close_stream=True)
    except OSError as e:
        stream.close()
        logger.error("reading piped input failed: %s", e)
        print(f"Error: cannot read input: {e.strerror or e}", file=sys.stderr)
        return 1
    if ingestor is None:
        stream.close()
        print(INVALID_INPUT_MESSAGE, file=sys.stderr)
        return 1

    # [LAW:single-enforcer] The with block guarantees cancel + join on every exit path.
    with ingestor:
        tab = Tab(name, TabularStore(ingestor.headers), ViewMode.PIPE_DATA)
        workspace = Workspace()
        workspace.add_tab(tab)
        TableExplorerApp(workspace, ingestor=ingestor, stream_tab=tab, config=config).run()
    return 0


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    if args.file is None and not stdin_is_piped():
        parser.print_usage(sys.stderr)
        sys.exit(1)

    path = Path(args.file).expanduser() if args.file else None
    name = args.name or (path.name if path is not None else "stdin")

    # [LAW:single-enforcer] Runtime logger configuration is centralized in io.logging_setup.
    log_runtime = table_explorer.io.logging_setup.configure(session_name=name, level=args.log_level)
    logger.info("pte starting log_level=%s log_file=%s", log_runtime.level_name, log_runtime.file_path)

    config = table_explorer.settings.load_runtime_config()
    if path is not None:
        code = _run_file(path, name, config)
    else:
        code = _run_stdin(name, config)
    logger.info("pte exiting code=%d", code)
    sys.exit(code)


if __name__ == "__main__":
    main()
