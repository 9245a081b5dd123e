# kubeSwitch/dispatch/dispatcher.py
import logging
import sys
from typing import Any, Dict

from kubeSwitch.dispatch.command_registry import global_command_registry
from kubeSwitch.errors import KubeSwitchError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def execute_command(action: str, parsed_args: Dict[str, Any], session) -> int:
    """
    Runs the handler registered for `action` and maps its outcome to an exit status.

    Every KubeSwitchError becomes a single `❌` line on stderr. Nothing is retried.
    """
    err = getattr(session, "err", None) or sys.stderr
    handler = global_command_registry.get_handler(action)
    if handler is None:
        print(f"❌ Unsupported action: '{action}'", file=err)
        return EXIT_FAILURE

    logger.debug(f"Dispatching action '{action}' with {parsed_args!r}")
    try:
        handler(parsed_args, session)
    except KubeSwitchError as e:
        logger.debug(f"Action '{action}' failed", exc_info=True)
        print(f"❌ {e}", file=err)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        print("\n❌ Interrupted.", file=err)
        return EXIT_INTERRUPTED
    return EXIT_OK
