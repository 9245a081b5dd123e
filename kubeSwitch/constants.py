# kubeSwitch/constants.py
"""
This module defines constants used throughout the kubeswitch application.
"""

# Environment variables declared by the shell wrapper
ENV_CURRENT_NAME = "KUBESWITCH_NAME"
ENV_CURRENT_NAMESPACE = "KUBESWITCH_NAMESPACE"
ENV_CONFIG_PATH = "KUBESWITCH_CONFIG_PATH"
ENV_DEBUG = "KUBESWITCH_DEBUG"
ENV_EDITOR = "EDITOR"
ENV_KUBECONFIG = "KUBECONFIG"

# Default file locations (relative to $HOME)
CONFIG_FILE_NAME = "kubeswitch.yaml"
CONFIG_DIR_NAME = ".config"
HISTORY_FILE_NAME = ".kubeswitch_history"

# Default Values
DEFAULT_NAMESPACE = "default"
DEFAULT_CMD = "ks"
DEFAULT_EDITOR = "vi"
DEFAULT_KUBE_EXEC = "kubectl"
DEFAULT_KUBE_CMD = "k"
DEFAULT_KUBE_DIR = "~/.kube/config"

# Query markers
QUERY_PREVIOUS = "-"
QUERY_DIR_SUFFIX = "/"
LINK_SEPARATOR = ":"

# Switch protocol
SWITCH_SENTINEL = "__switch__"
FLAG_ON = "1"
FLAG_OFF = "0"

# Interactive matcher
FZF_EXECUTABLE = "fzf"
FZF_EXIT_NO_MATCH = 1
FZF_EXIT_ERROR = 2
FZF_EXIT_CANCELED = 130

# kubectl arguments
KUBECTL_LIST_NAMESPACES_ARGS = [
    "get",
    "namespaces",
    "-o",
    "custom-columns=NAME:.metadata.name",
    "--no-headers",
]

# History reader block size in bytes
HISTORY_BLOCK_SIZE = 4096

SUPPORTED_SHELLS = ("bash", "zsh")

# CLI actions, in the order they take precedence when several flags are given
ACTION_LINK = "link"
ACTION_COMPLETION = "completion"
ACTION_INIT = "init"
ACTION_VERSION = "version"
ACTION_LIST = "list"
ACTION_SHOW = "show"
ACTION_UNSET = "unset"
ACTION_EDIT = "edit"
ACTION_DELETE = "delete"
ACTION_NAMESPACE = "namespace"
ACTION_SWITCH = "switch"
