# kubeSwitch/handlers.py
"""
Handlers for the kubeswitch CLI actions.
These functions bridge the parsed command line to the resolvers and the store,
and finish by telling the shell what to do through the switch protocol.

Only the protocol and completion items go to stdout; the shell function
captures stdout, so every message for the user goes to stderr.
"""
import logging
import os
import shlex
import subprocess
import sys
import tempfile
from typing import Any, Dict

from tabulate import tabulate

from kubeSwitch.__version__ import __version__
from kubeSwitch.completion import completion_items, render_init_script
from kubeSwitch.constants import (
    ACTION_COMPLETION, ACTION_DELETE, ACTION_EDIT, ACTION_INIT, ACTION_LINK, ACTION_LIST,
    ACTION_NAMESPACE, ACTION_SHOW, ACTION_SWITCH, ACTION_UNSET, ACTION_VERSION,
)
from kubeSwitch.core.session import SwitchSession
from kubeSwitch.dispatch.command_registry import CommandRegistry, global_command_registry
from kubeSwitch.engine.resolver import SelectMode
from kubeSwitch.errors import EditError, KubeSwitchError, StoreError
from kubeSwitch.store.kubeconfig import parse_namespace

logger = logging.getLogger(__name__)


def handle_switch(parsed_args: Dict[str, Any], session: SwitchSession):
    """Handles `kubeswitch [NAME|-|DIR/]`."""
    context = session.contexts.resolve(parsed_args.get("name"), SelectMode.SWITCH)
    session.switch_to(context)


def handle_namespace(parsed_args: Dict[str, Any], session: SwitchSession):
    """Handles `kubeswitch -n [NAMESPACE|-]` for the current (or a selected) context."""
    context = session.contexts.resolve(None, SelectMode.GET_REQUIRED)
    namespace = session.namespaces.select_namespace(context, parsed_args.get("name"))
    session.namespaces.set_namespace(context, namespace)
    session.switch_to(context)


def handle_list(parsed_args: Dict[str, Any], session: SwitchSession):
    contexts = session.store.list()
    if not contexts:
        session.info(f"ℹ️ No kubeconfig found in '{session.store.root}'.")
        return

    table_data = []
    for context in contexts:
        table_data.append([
            "*" if context.current else "",
            context.name,
            context.alias_link or "",
            context.namespace,
        ])
    headers = ["", "NAME", "LINK", "NAMESPACE"]
    session.info(tabulate(table_data, headers=headers, tablefmt="plain"))


def handle_show(parsed_args: Dict[str, Any], session: SwitchSession):
    session.info(session.contexts.current().display)


def handle_unset(parsed_args: Dict[str, Any], session: SwitchSession):
    session.clean()


def handle_edit(parsed_args: Dict[str, Any], session: SwitchSession):
    """
    Handles `kubeswitch -e [NAME]`.

    The kubeconfig (empty for a new name) is opened in the configured editor
    through a temporary file. Empty or unchanged content is rejected, and so
    is content that is not valid YAML. If the edited context is the current
    one, the shell is switched again so it picks up the new namespace.
    """
    context = session.contexts.resolve(parsed_args.get("name"), SelectMode.GET_NOT_REQUIRED)
    original = session.store.read_bytes(context.name)
    edited = _edit_in_editor(session.config.editor, original, session.environ)

    if not edited.strip():
        raise EditError("edit content cannot be empty")
    if edited == original:
        raise EditError("edit content not changed")
    try:
        namespace = parse_namespace(edited, context.path)
    except StoreError as e:
        raise EditError(f"edited content is not valid YAML: {e.reason}") from e

    session.store.write(context.name, edited)
    session.info(f"✅ Kubeconfig '{context.name}' saved.")
    if context.current:
        context.namespace = namespace
        session.switch_to(context)


def _edit_in_editor(editor: str, content: bytes, environ: Dict[str, str]) -> bytes:
    fd, tmp_path = tempfile.mkstemp(prefix="kubeswitch-", suffix=".yaml")
    try:
        with os.fdopen(fd, "wb") as tmp:
            tmp.write(content)

        command = shlex.split(editor) + [tmp_path]
        logger.debug(f"Launching editor: {' '.join(command)}")
        try:
            # stdout belongs to the protocol, so the editor draws on stderr.
            result = subprocess.run(command, stdout=sys.stderr, env=environ, check=False)
        except FileNotFoundError as e:
            raise EditError(f"editor '{command[0]}' not found") from e
        except OSError as e:
            raise EditError(f"launch editor '{editor}': {e}") from e
        if result.returncode != 0:
            raise EditError(f"editor '{editor}' exited with code {result.returncode}")

        with open(tmp_path, "rb") as f:
            return f.read()
    except OSError as e:
        raise EditError(f"edit temp file '{tmp_path}': {e}") from e
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)


def handle_delete(parsed_args: Dict[str, Any], session: SwitchSession):
    """Handles `kubeswitch -d [NAME]`; asks for confirmation unless `-y` is given."""
    context = session.contexts.resolve(parsed_args.get("name"), SelectMode.GET_REQUIRED)
    if not parsed_args.get("yes"):
        # The prompt goes to stderr, input() would print it to stdout.
        print(f"Delete kubeconfig '{context.display}'? (y/n): ", end="", file=session.err, flush=True)
        try:
            confirm = input().strip().lower()
        except EOFError as e:
            raise KubeSwitchError("confirm: scan terminal stdin: reached end of input") from e
        if confirm != 'y':
            raise KubeSwitchError("user aborted")

    session.store.delete(context.name)
    session.info(f"✅ Kubeconfig '{context.name}' deleted.")
    if context.current:
        session.clean()


def handle_link(parsed_args: Dict[str, Any], session: SwitchSession):
    """Handles `kubeswitch -L SOURCE:TARGET`."""
    spec = parsed_args.get("link")
    target = session.store.create_alias(spec)
    session.info(f"✅ Link '{spec}' created ({target}).")


def handle_completion(parsed_args: Dict[str, Any], session: SwitchSession):
    """Prints completion items to stdout; failures print nothing."""
    try:
        items = completion_items(parsed_args.get("comp_args") or [], session)
    except KubeSwitchError as e:
        logger.debug(f"Completion failed: {e}")
        return
    for item in items:
        print(item, file=session.out)


def handle_init(parsed_args: Dict[str, Any], session: SwitchSession):
    script = render_init_script(parsed_args.get("shell"), session.config.cmd)
    session.out.write(script)
    session.out.flush()


def handle_version(parsed_args: Dict[str, Any], session: SwitchSession):
    session.info(f"{session.config.cmd} {__version__}")
    session.info(f"Config path: {session.config.path or 'N/A'}")


def register_handlers(registry: CommandRegistry = global_command_registry):
    registry.register(ACTION_SWITCH, handle_switch)
    registry.register(ACTION_NAMESPACE, handle_namespace)
    registry.register(ACTION_LIST, handle_list)
    registry.register(ACTION_SHOW, handle_show)
    registry.register(ACTION_UNSET, handle_unset)
    registry.register(ACTION_EDIT, handle_edit)
    registry.register(ACTION_DELETE, handle_delete)
    registry.register(ACTION_LINK, handle_link)
    registry.register(ACTION_COMPLETION, handle_completion)
    registry.register(ACTION_INIT, handle_init)
    registry.register(ACTION_VERSION, handle_version)
