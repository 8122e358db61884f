from __future__ import annotations

import argparse
from pathlib import Path

from .constants import DEFAULT_CONTAINER, DEFAULT_KEY_SPEC
from .document import MergeError, MergeOptions, MergeResult, merge_files, sort_file
from .util import dumps_pretty


def _init_logging(args: argparse.Namespace) -> None:
    from .app_logging import init_app_logging

    init_app_logging(component=str(args.cmd), to_file=bool(getattr(args, "log_file", False)))


def _opts(args: argparse.Namespace) -> MergeOptions:
    return MergeOptions(
        container=str(args.container),
        source_container=str(getattr(args, "source_container", DEFAULT_CONTAINER)),
        key=str(args.key),
        check_only=bool(args.check),
    )


def _exit_code(res: MergeResult, opts: MergeOptions) -> int:
    """Exit codes:
      - 0: done (or, with --check, nothing to change)
      - 1: --check and the target would change
    """
    if opts.check_only and res.changed:
        return 1
    return 0


def _cmd_merge(args: argparse.Namespace) -> int:
    """Merge the elements of a source document into the target."""
    _init_logging(args)
    opts = _opts(args)
    try:
        res = merge_files(Path(args.target), Path(args.source), opts)
    except MergeError as e:
        raise SystemExit(f"MERGE FAILED: {e}") from e

    if args.json:
        print(dumps_pretty(res))
    else:
        _print_human("MERGE", res, opts)
    return _exit_code(res, opts)


def _cmd_sort(args: argparse.Namespace) -> int:
    """Sort the target container in place, keeping comments and whitespace."""
    _init_logging(args)
    opts = _opts(args)
    try:
        res = sort_file(Path(args.target), opts)
    except MergeError as e:
        raise SystemExit(f"SORT FAILED: {e}") from e

    if args.json:
        print(dumps_pretty(res))
    else:
        _print_human("SORT", res, opts)
    return _exit_code(res, opts)


def _print_human(title: str, res: MergeResult, opts: MergeOptions) -> None:
    print(f"== xmlmerge_tool: {title} ==")
    print(f"Target:     {res.target}")
    print(f"Container:  {opts.container}")
    print(f"Key:        {opts.key}")
    print(f"Elements:   {res.elements_before} -> {res.elements_after} ({res.new_elements} new/updated input)")
    if not res.changed:
        status = "unchanged"
    elif res.written:
        status = "changed (written)"
    else:
        status = "would change (check only)"
    print(f"Result:     {status}")


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("target", help="XML file to update in place.")
    p.add_argument(
        "--container",
        default=DEFAULT_CONTAINER,
        help="ElementTree path (relative to the root) of the element whose children are merged (default: root).",
    )
    p.add_argument(
        "--key",
        default=DEFAULT_KEY_SPEC,
        help="Sort key: 'tag' for the element name or '@attr' for an attribute value (default: @name).",
    )
    p.add_argument("--check", action="store_true", help="Do not write; exit 1 if the file would change.")
    p.add_argument("--json", action="store_true", help="Emit JSON result.")
    p.add_argument("--log-file", action="store_true", help="Also write a per-run log under ./logs.")


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(
        prog="xmlmerge_tool",
        description="Sorted XML element merge (keeps comments and indentation of hand-edited config).",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    p_merge = sub.add_parser("merge", help="Merge elements from a source XML file into a target XML file.")
    _add_common(p_merge)
    p_merge.add_argument("--source", required=True, help="XML file holding the new elements.")
    p_merge.add_argument(
        "--source-container",
        default=DEFAULT_CONTAINER,
        help="ElementTree path of the element in the source whose children are merged (default: root).",
    )
    p_merge.set_defaults(func=_cmd_merge)

    p_sort = sub.add_parser("sort", help="Sort the children of a container by key, in place.")
    _add_common(p_sort)
    p_sort.set_defaults(func=_cmd_sort)

    args = p.parse_args(argv)
    rv = args.func(args)
    if rv is None:
        return 0
    return int(rv)
