# kubeSwitch/completion.py
"""
Shell integration: the wrapper function that evaluates the switch protocol,
and the items offered by tab completion.
"""
import logging
from typing import List, Sequence

from kubeSwitch.constants import SUPPORTED_SHELLS, SWITCH_SENTINEL

logger = logging.getLogger(__name__)

EXECUTABLE_NAME = "kubeswitch"
NAMESPACE_FLAGS = ("-n", "--namespace")

# @CMD@ is the wrapper function name (`cmd` in the config), @EXE@ the installed executable.
_WRAPPER_FUNCTION = r"""
@CMD@() {
    local output
    output=$(command @EXE@ "$@") || return $?
    if [ -z "$output" ]; then
        return 0
    fi
    if [ "$(printf '%s\n' "$output" | sed -n '1p')" != "@SENTINEL@" ]; then
        printf '%s\n' "$output"
        return 0
    fi

    local alias_cmd export_flag clean_flag
    alias_cmd=$(printf '%s\n' "$output" | sed -n '2p')
    export_flag=$(printf '%s\n' "$output" | sed -n '3p')
    clean_flag=$(printf '%s\n' "$output" | sed -n '4p')
    if [ "$clean_flag" = "1" ]; then
        unset KUBESWITCH_NAME KUBESWITCH_NAMESPACE KUBESWITCH_DISPLAY
        if [ "$export_flag" = "1" ]; then
            unset KUBECONFIG
        fi
        unalias "$alias_cmd" 2>/dev/null
        return 0
    fi

    export KUBESWITCH_NAME="$(printf '%s\n' "$output" | sed -n '5p')"
    export KUBESWITCH_NAMESPACE="$(printf '%s\n' "$output" | sed -n '6p')"
    export KUBESWITCH_DISPLAY="$(printf '%s\n' "$output" | sed -n '7p')"

    local kube_exec kubeconfig_path
    kube_exec=$(printf '%s\n' "$output" | sed -n '8p')
    kubeconfig_path=$(printf '%s\n' "$output" | sed -n '9p')
    alias "$alias_cmd"="$kube_exec --kubeconfig $kubeconfig_path --namespace $KUBESWITCH_NAMESPACE"
    if [ "$export_flag" = "1" ]; then
        export KUBECONFIG="$kubeconfig_path"
    fi
}
"""

_BASH_COMPLETION = r"""
_@CMD@_complete() {
    local items
    items=$(command @EXE@ --comp -- "${COMP_WORDS[@]:1:COMP_CWORD-1}" 2>/dev/null)
    COMPREPLY=($(compgen -W "$items" -- "${COMP_WORDS[COMP_CWORD]}"))
}

complete -o default -F _@CMD@_complete @CMD@
"""

_ZSH_COMPLETION = r"""
_@CMD@_complete() {
    local -a items
    items=(${(f)"$(command @EXE@ --comp -- "${(@)words[2,CURRENT-1]}" 2>/dev/null)"})
    _describe 'command' items
}

compdef _@CMD@_complete @CMD@
"""


def render_init_script(shell: str, cmd: str, executable: str = EXECUTABLE_NAME) -> str:
    """
    Returns the init script for `shell`, meant to be evaluated from the shell's rc file.

    Raises:
        ValueError: if the shell is not supported.
    """
    if shell not in SUPPORTED_SHELLS:
        raise ValueError(f"unsupported shell '{shell}', expected one of: {', '.join(SUPPORTED_SHELLS)}")
    completion = _BASH_COMPLETION if shell == "bash" else _ZSH_COMPLETION
    script = _WRAPPER_FUNCTION + completion
    return (script.replace("@CMD@", cmd)
                  .replace("@EXE@", executable)
                  .replace("@SENTINEL@", SWITCH_SENTINEL)
                  .lstrip("\n"))


def completion_items(args: Sequence[str], session) -> List[str]:
    """
    Completion candidates for the words typed so far.

    Namespaces of the current context after `-n`, otherwise context names and
    the directories that group them.
    """
    if any(arg in NAMESPACE_FLAGS for arg in args):
        context = session.contexts.current()
        return session.namespaces.list_namespaces(context)

    items = []
    seen_dirs = set()
    for context in session.store.list():
        parts = context.name.split("/")[:-1]
        for depth in range(1, len(parts) + 1):
            directory = "/".join(parts[:depth]) + "/"
            if directory not in seen_dirs:
                seen_dirs.add(directory)
                items.append(directory)
        items.append(context.name)
    logger.debug(f"Completion: {len(items)} item(s) for {list(args)!r}")
    return items
