# kubeSwitch/main.py
"""
kubeswitch entry point.

Parses the command line, configures logging, builds the session for this
invocation and dispatches to the handler of the selected action. Meant to be
called through the shell function printed by `kubeswitch --init <shell>`.
"""
import argparse
import logging
import os
import sys
from typing import List, Mapping, Optional, Sequence, TextIO, Tuple

from kubeSwitch.__version__ import __version__
from kubeSwitch.constants import (
    ACTION_COMPLETION, ACTION_DELETE, ACTION_EDIT, ACTION_INIT, ACTION_LINK, ACTION_LIST,
    ACTION_NAMESPACE, ACTION_SHOW, ACTION_SWITCH, ACTION_UNSET, ACTION_VERSION,
    ENV_DEBUG, SUPPORTED_SHELLS,
)
from kubeSwitch.core.session import SwitchSession
from kubeSwitch.dispatch.dispatcher import EXIT_FAILURE, execute_command
from kubeSwitch.errors import KubeSwitchError
from kubeSwitch.handlers import register_handlers

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Flag attribute -> action, highest precedence first.
ACTION_FLAGS = [
    ("link", ACTION_LINK),
    ("comp", ACTION_COMPLETION),
    ("init", ACTION_INIT),
    ("version", ACTION_VERSION),
    ("list", ACTION_LIST),
    ("show", ACTION_SHOW),
    ("unset", ACTION_UNSET),
    ("edit", ACTION_EDIT),
    ("delete", ACTION_DELETE),
    ("namespace", ACTION_NAMESPACE),
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kubeswitch",
        description="Switch between kubernetes configs and namespaces.",
    )
    parser.add_argument(
        "name",
        nargs="?",
        default=None,
        help="The kubeconfig or namespace name (with -n). '-' selects the previous one, "
             "a trailing '/' selects inside a directory",
    )
    parser.add_argument("-n", "--namespace", action="store_true",
                        help="Switch namespace rather than kubeconfig; NAME becomes the namespace")
    parser.add_argument("-e", "--edit", action="store_true", help="Edit the kubeconfig in the editor")
    parser.add_argument("-d", "--delete", action="store_true", help="Delete the kubeconfig file")
    parser.add_argument("-l", "--list", action="store_true", help="List kubeconfigs")
    parser.add_argument("-s", "--show", action="store_true", help="Show the current kubeconfig")
    parser.add_argument("-u", "--unset", action="store_true", help="Leave the current kubeconfig")
    parser.add_argument("-L", "--link", metavar="SRC:DST", default=None,
                        help="Create DST as a link to the kubeconfig SRC")
    parser.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")
    parser.add_argument("-v", "--version", action="store_true", help="Show version")
    parser.add_argument("--init", choices=SUPPORTED_SHELLS, default=None,
                        help="Print the shell init script")
    parser.add_argument("--comp", action="store_true",
                        help="Generate completion items for the arguments after '--'. Used by the init script")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging on stderr")
    return parser


def split_comp_args(argv: Sequence[str]) -> Tuple[List[str], List[str]]:
    """Splits `argv` at the first '--'; everything after it is completion input."""
    argv = list(argv)
    if "--" not in argv:
        return argv, []
    index = argv.index("--")
    return argv[:index], argv[index + 1:]


def select_action(args: argparse.Namespace) -> str:
    for attribute, action in ACTION_FLAGS:
        if getattr(args, attribute):
            return action
    return ACTION_SWITCH


def setup_logging(debug: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def main(argv: Optional[Sequence[str]] = None, environ: Optional[Mapping[str, str]] = None,
         out: Optional[TextIO] = None, err: Optional[TextIO] = None) -> int:
    """
    Runs one kubeswitch invocation.

    Returns:
        The process exit status: 0 on success, 1 on any kubeswitch error,
        130 when interrupted. Usage errors exit with 2 from argparse.
    """
    argv = sys.argv[1:] if argv is None else argv
    environ = os.environ if environ is None else environ
    err = err or sys.stderr

    argv, comp_args = split_comp_args(argv)
    parser = build_parser()
    args = parser.parse_args(argv)
    if comp_args and not args.comp:
        parser.error("arguments after '--' are only accepted with --comp")

    setup_logging(args.debug or environ.get(ENV_DEBUG) == "1")
    action = select_action(args)
    logger.debug(f"kubeswitch {__version__}: action '{action}'")

    try:
        session = SwitchSession.from_environ(environ, out=out, err=err)
    except KubeSwitchError as e:
        logger.debug("Failed to initialize session", exc_info=True)
        print(f"❌ load config: {e}", file=err)
        return EXIT_FAILURE

    parsed_args = {
        "name": args.name,
        "link": args.link,
        "shell": args.init,
        "yes": args.yes,
        "comp_args": comp_args,
    }
    register_handlers()
    return execute_command(action, parsed_args, session)


if __name__ == "__main__":
    sys.exit(main())
