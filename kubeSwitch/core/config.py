# kubeSwitch/core/config.py
"""
Loads and validates the kubeswitch configuration document.

The document is YAML, read from $KUBESWITCH_CONFIG_PATH or
~/.config/kubeswitch.yaml. A missing file means "all defaults"; anything else
that is wrong with it is a ConfigError raised before any resolution runs.
"""
import logging
import os
import re
import shutil
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

import yaml

from kubeSwitch.constants import (
    CONFIG_DIR_NAME,
    CONFIG_FILE_NAME,
    DEFAULT_CMD,
    DEFAULT_EDITOR,
    DEFAULT_KUBE_CMD,
    DEFAULT_KUBE_DIR,
    DEFAULT_KUBE_EXEC,
    ENV_CONFIG_PATH,
    ENV_EDITOR,
)
from kubeSwitch.core.ns_alias import AliasMatcher, AliasRule
from kubeSwitch.errors import ConfigError

logger = logging.getLogger(__name__)

_ENV_VAR_PATTERN = re.compile(r"\$(?:\{(\w+)\}|(\w+))")


@dataclass
class KubeSettings:
    exec: str = DEFAULT_KUBE_EXEC
    cmd: str = DEFAULT_KUBE_CMD
    dir: str = DEFAULT_KUBE_DIR
    export_kubeconfig: bool = False
    update_context: bool = False


@dataclass
class Config:
    cmd: str = DEFAULT_CMD
    editor: str = DEFAULT_EDITOR
    kube: KubeSettings = field(default_factory=KubeSettings)
    ns_alias: List[AliasRule] = field(default_factory=list)
    path: Optional[str] = None

    @property
    def alias_matcher(self) -> AliasMatcher:
        return AliasMatcher(self.ns_alias)


def expand_env(value: str, environ: Mapping[str, str]) -> str:
    """
    Expands `~`, `$VAR` and `${VAR}` using the given environment.

    Raises:
        ConfigError: if a referenced variable is not defined.
    """
    def _replace(match):
        name = match.group(1) or match.group(2)
        if name not in environ:
            raise ConfigError(f"expand env for '{value}': variable '{name}' is not defined")
        return environ[name]

    expanded = _ENV_VAR_PATTERN.sub(_replace, value)
    if expanded == "~" or expanded.startswith("~/"):
        home = environ.get("HOME")
        if not home:
            raise ConfigError(f"expand env for '{value}': $HOME is not defined")
        expanded = home + expanded[1:]
    return expanded


def get_config_path(environ: Mapping[str, str]) -> Optional[str]:
    """Returns the config file path, or None when no file exists."""
    path = environ.get(ENV_CONFIG_PATH)
    if not path:
        home = environ.get("HOME")
        if not home:
            raise ConfigError("$HOME env not found in your system, please make sure that you are in an UNIX system")
        path = os.path.join(home, CONFIG_DIR_NAME, CONFIG_FILE_NAME)

    try:
        if os.path.isdir(path):
            raise ConfigError(f"config path '{path}' is a directory, require file")
        os.stat(path)
    except FileNotFoundError:
        return None
    except OSError as e:
        raise ConfigError(f"stat config file '{path}': {e}") from e
    return path


def load_config(environ: Optional[Mapping[str, str]] = None) -> Config:
    """
    Loads the configuration for this invocation.

    Args:
        environ: Environment mapping to read paths and expansions from.
            Defaults to os.environ.

    Returns:
        A validated Config.

    Raises:
        ConfigError: on any problem with the document.
    """
    environ = os.environ if environ is None else environ
    path = get_config_path(environ)
    raw: Dict[str, Any] = {}
    if path is not None:
        raw = _read_document(path)
        logger.debug(f"Loaded config file '{path}'")
    else:
        logger.debug("No config file found, using defaults")
    config = parse_config(raw, environ)
    config.path = path
    return config


def _read_document(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"parse config yaml '{path}': {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"read config file '{path}': {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config file '{path}' must contain a mapping at top level")
    return data


def parse_config(raw: Mapping[str, Any], environ: Mapping[str, str]) -> Config:
    """Builds and validates a Config from an already-deserialized document."""
    default_editor = environ.get(ENV_EDITOR) or DEFAULT_EDITOR

    cmd = _get_str(raw, "cmd", DEFAULT_CMD)
    editor = _get_str(raw, "editor", None)
    editor = default_editor if editor is None else _require(expand_env(editor, environ), "editor")

    kube_raw = raw.get("kube") or {}
    if not isinstance(kube_raw, Mapping):
        raise ConfigError("`kube` must be a mapping")
    kube = _parse_kube(kube_raw, environ)

    alias_raw = raw.get("ns_alias") or []
    if not isinstance(alias_raw, list):
        raise ConfigError("`ns_alias` must be a list")
    rules = [AliasRule.from_dict(entry, index) for index, entry in enumerate(alias_raw)]

    return Config(cmd=_require(cmd, "cmd"), editor=editor, kube=kube, ns_alias=rules)


def _parse_kube(raw: Mapping[str, Any], environ: Mapping[str, str]) -> KubeSettings:
    exec_name = _require(expand_env(_get_str(raw, "exec", DEFAULT_KUBE_EXEC, "kube."), environ), "kube.exec")
    kube_cmd = _require(_get_str(raw, "cmd", DEFAULT_KUBE_CMD, "kube."), "kube.cmd")
    store_dir = _require(expand_env(_get_str(raw, "dir", DEFAULT_KUBE_DIR, "kube."), environ), "kube.dir")
    settings = KubeSettings(
        exec=exec_name,
        cmd=kube_cmd,
        dir=os.path.normpath(store_dir),
        export_kubeconfig=_get_bool(raw, "export_kubeconfig"),
        update_context=_get_bool(raw, "update_context"),
    )

    # Persisting namespaces always shells out to kube.exec.
    if settings.update_context and shutil.which(settings.exec, path=environ.get("PATH")) is None:
        raise ConfigError(
            f"`kube.update_context` requires `kube.exec` ('{settings.exec}') to be an executable on PATH"
        )
    return settings


def _get_str(raw: Mapping[str, Any], key: str, default: Optional[str], prefix: str = "") -> Optional[str]:
    value = raw.get(key, default)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ConfigError(f"`{prefix}{key}` must be a string")
    return value


def _get_bool(raw: Mapping[str, Any], key: str) -> bool:
    value = raw.get(key, False)
    if not isinstance(value, bool):
        raise ConfigError(f"`kube.{key}` must be a boolean")
    return value


def _require(value: Optional[str], name: str) -> str:
    if not value:
        raise ConfigError(f"`{name}` cannot be empty")
    return value
