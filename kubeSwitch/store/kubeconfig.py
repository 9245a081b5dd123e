# kubeSwitch/store/kubeconfig.py
"""
Minimal kubeconfig reading.

Only two fields matter here: `current-context` and the namespace of the context
it names. Everything else in the document is opaque.
"""
from typing import Any, Optional, Union

import yaml

from kubeSwitch.constants import DEFAULT_NAMESPACE
from kubeSwitch.errors import StoreError


def current_namespace(document: Any) -> Optional[str]:
    """Returns the namespace of the document's current context, if it declares one."""
    if not isinstance(document, dict):
        return None
    current = document.get("current-context")
    contexts = document.get("contexts")
    if not current or not isinstance(contexts, list):
        return None
    for entry in contexts:
        if not isinstance(entry, dict) or entry.get("name") != current:
            continue
        context = entry.get("context")
        if not isinstance(context, dict):
            return None
        namespace = context.get("namespace")
        return str(namespace) if namespace else None
    return None


def parse_namespace(content: Union[bytes, str], path: str = "") -> str:
    """
    Parses kubeconfig content and returns its active namespace.

    Raises:
        StoreError: if the content is not valid YAML.
    """
    try:
        document = yaml.safe_load(content) if content else None
    except yaml.YAMLError as e:
        raise StoreError("parse kubeconfig file", path, str(e)) from e
    return current_namespace(document) or DEFAULT_NAMESPACE


def read_namespace(path: str) -> str:
    """
    Reads the active namespace of the kubeconfig at `path`.

    A missing file (including a dangling symlink) reads as the default namespace.
    """
    try:
        with open(path, "rb") as f:
            content = f.read()
    except FileNotFoundError:
        return DEFAULT_NAMESPACE
    except OSError as e:
        raise StoreError("read kubeconfig file", path, e.strerror) from e
    return parse_namespace(content, path)
