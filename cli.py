"""Headless generate-and-zip, without the desktop UI."""
import argparse
import sys

from dotenv import load_dotenv

from context import AppContext
from errors import ConfigError
from logging_bus import LogEvent, flush, set_file_logger, set_verbose, start_dispatcher, subscribe, unsubscribe
from logic.archive import ArchivePackager, DirectoryFileSaver, ZipArchiveBuilder
from logic.session import SessionController
from services.generation_client import GenerationClient


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sketch-assist", description="Prompt -> Arduino project -> ZIP")
    sub = parser.add_subparsers(dest="cmd", required=True)

    gen = sub.add_parser("generate", help="Generate a project and save it as <projectName>.zip")
    gen.add_argument("prompt", help="Natural language description of the project")
    gen.add_argument("--out", default=".", help="Directory for the archive (default: current directory)")
    gen.add_argument("--model", default=None, help="Override the model")
    gen.add_argument("--verbose", action="store_true", help="Also print informational activity events")
    gen.add_argument("--log-file", default=None, help="Append activity events to this JSON lines file")
    return parser


def format_event(evt: LogEvent) -> str:
    meta = " ".join(f"{k}={v}" for k, v in evt.meta.items())
    return f"[{evt.level}] {evt.kind} {evt.msg} {meta}".rstrip()


def _print_event(evt: LogEvent) -> None:
    print(format_event(evt), file=sys.stderr)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    load_dotenv()
    try:
        ctx = AppContext.from_env()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    # warnings and errors always reach stderr
    set_verbose(args.verbose)
    set_file_logger(args.log_file)
    subscribe(_print_event)
    start_dispatcher()
    try:
        return _generate(ctx, args)
    finally:
        flush()
        unsubscribe(_print_event)
        set_file_logger(None)


def _generate(ctx: AppContext, args) -> int:
    client = GenerationClient(ctx.api_key, model=args.model or ctx.model, timeout=ctx.timeout)
    packager = ArchivePackager(ZipArchiveBuilder(), DirectoryFileSaver(args.out))
    errors = []
    controller = SessionController(client, packager, notify_error=lambda title, msg: errors.append(msg))

    controller.set_prompt(args.prompt)
    controller.submit()
    if controller.state.last_error:
        print(f"Generation failed: {controller.state.last_error}", file=sys.stderr)
        return 1

    project = controller.state.current_project
    for f in project.files:
        print(f"  {f.filename} ({len(f.content)} chars)")
    path = controller.download()
    if path is None:
        print(f"Download failed: {errors[-1] if errors else 'unknown error'}", file=sys.stderr)
        return 1
    print(path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
