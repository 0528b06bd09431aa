"""Entry point launching the Tk desktop application."""
import sys

from dotenv import load_dotenv

from context import AppContext
from errors import ConfigError
from logging_bus import emit, set_file_logger, set_verbose, start_dispatcher


def main() -> int:
    load_dotenv()
    try:
        ctx = AppContext.from_env()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    set_verbose(ctx.settings.get('verbose', True))
    set_file_logger(ctx.settings.get('activity_log_file'))
    start_dispatcher()
    emit('INFO', 'SYSTEM', 'Starting', model=ctx.model)

    # imported late so a missing key fails before Tk is touched
    from ui.layout import launch_ui
    launch_ui(ctx)
    return 0


if __name__ == '__main__':
    sys.exit(main())
