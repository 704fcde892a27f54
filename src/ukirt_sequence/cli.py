from __future__ import annotations

import argparse
import logging
from pathlib import Path

from rich import print
from rich.markup import escape

from ukirt_sequence.errors import AmbiguousModeError, SequenceError, UnknownInstrumentError
from ukirt_sequence.log import setup_logging, timer
from ukirt_sequence.sequence import SequenceDocument
from ukirt_sequence.settings import SequenceSettings, load_settings
from ukirt_sequence.version import version_string


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="ukirt-seq", description="Inspect and edit UKIRT sequences")
    p.add_argument(
        "--log-level",
        default=None,
        help="CRITICAL|ERROR|WARNING|INFO|DEBUG (or env UKIRT_SEQ_LOG_LEVEL)",
    )
    p.add_argument("--settings", default=None, help="settings.yaml (or env UKIRT_SEQ_SETTINGS)")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("version", help="Print version and exit")

    p_sum = sub.add_parser("summary", help="One-line summary per exec")
    p_sum.add_argument("execs", nargs="+")

    p_info = sub.add_parser("info", help="Show what an exec resolves to")
    p_info.add_argument("exec")

    p_hdr = sub.add_parser("header", help="Show or set a setHeader item")
    p_hdr.add_argument("exec")
    p_hdr.add_argument("name")
    p_hdr.add_argument("--set", dest="value", default=None, help="New value")
    p_hdr.add_argument("--output-dir", default=None, help="Where to write the edited exec")
    return p


def _cmd_summary(args: argparse.Namespace, settings: SequenceSettings) -> int:
    for path in args.execs:
        seq = SequenceDocument.from_file(path, settings=settings)
        print(escape(f"{seq.summary()} {Path(path).name}"))
    return 0


def _describe(fn) -> str:
    try:
        return fn() or "-"
    except (UnknownInstrumentError, AmbiguousModeError) as e:
        return f"n/a ({e})"


def _cmd_info(args: argparse.Namespace, settings: SequenceSettings) -> int:
    seq = SequenceDocument.from_file(args.exec, settings=settings)
    res = seq.resolve_instrument()
    rows = [
        ("Instrument", f"{res.instrument} (from {res.source.value})"),
        ("Target", seq.get_target_name()),
        ("Guide", seq.get_guide_name() or "-"),
        ("Coordinates", "legacy SET_ lines" if seq.uses_legacy_coordinates else
         ("telConfig" if seq.coordinates is not None else "-")),
        ("Configs", ", ".join(seq.config_order) or "-"),
        ("Camera modes", _describe(lambda: ", ".join(seq.get_camera_modes()))),
        ("Waveband", _describe(seq.get_waveband)),
        ("Project", seq.get_project_id() or "-"),
        ("MSB", seq.get_msb_id() or "-"),
    ]
    for label, value in rows:
        print(f"[bold]{label}:[/bold] {escape(str(value))}")
    return 0


def _cmd_header(args: argparse.Namespace, settings: SequenceSettings) -> int:
    seq = SequenceDocument.from_file(args.exec, settings=settings)
    if args.value is None:
        values = seq.get_header_items(args.name)
        if not values:
            print(f"[yellow]No header {escape(args.name)}[/yellow]")
            return 1
        for v in values:
            print(escape(v))
        return 0

    seq.set_header_item(args.name, args.value)
    out_dir = args.output_dir or settings.output_dir or seq.input_dir
    path = seq.write_sequence(out_dir)
    print(f"[green]Wrote:[/green] {escape(str(path))}")
    return 0


_COMMANDS = {
    "summary": _cmd_summary,
    "info": _cmd_info,
    "header": _cmd_header,
}


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    if args.cmd == "version":
        print(version_string())
        return 0

    log = logging.getLogger("ukirt_sequence")
    try:
        settings = load_settings(args.settings)
        setup_logging(args.log_level or settings.log_level)
        with timer(args.cmd, log, execs=len(args.execs) if args.cmd == "summary" else 1):
            return _COMMANDS[args.cmd](args, settings)
    except SequenceError as e:
        log.debug("Command %s failed", args.cmd, exc_info=True)
        print(f"[red]Error:[/red] {escape(str(e))}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
