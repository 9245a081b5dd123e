# kubeSwitch/core/session.py
"""
Everything one kubeswitch invocation works with, built once at the CLI boundary.

Handlers receive a SwitchSession instead of reaching for os.environ, the
config file or the real terminal themselves.
"""
import logging
import os
import sys
from typing import Mapping, Optional, TextIO

from kubeSwitch.core.config import Config, load_config
from kubeSwitch.core.context import EnvironmentState, KubeContext
from kubeSwitch.engine.fzf import FzfMatcher, InteractiveMatcher
from kubeSwitch.engine.history import HistoryJournal
from kubeSwitch.engine.kubectl import KubectlRunner
from kubeSwitch.engine.namespace import NamespaceResolver
from kubeSwitch.engine.protocol import CleanResult, SwitchProtocolEmitter, SwitchResult
from kubeSwitch.engine.resolver import ContextResolver
from kubeSwitch.errors import ConfigError
from kubeSwitch.store.credential_store import CredentialStore

logger = logging.getLogger(__name__)


class SwitchSession:
    """
    Wires configuration, environment, store, history and resolvers together.

    Args:
        config: The loaded configuration.
        environment: What the shell declares as current.
        history_path: Location of the history file.
        matcher: Interactive matcher; fzf by default.
        runner: kubectl runner; built from `kube.exec` by default.
        out: Stream for the switch protocol and completion items.
        err: Stream for everything meant for the user.
        environ: Environment handed to child processes.
    """

    def __init__(self, config: Config, environment: EnvironmentState, history_path: str,
                 matcher: Optional[InteractiveMatcher] = None, runner: Optional[KubectlRunner] = None,
                 out: Optional[TextIO] = None, err: Optional[TextIO] = None,
                 environ: Optional[Mapping[str, str]] = None):
        self.config = config
        self.environment = environment
        self.out = out or sys.stdout
        self.err = err or sys.stderr
        self.environ = dict(os.environ if environ is None else environ)

        self.store = CredentialStore(config.kube.dir, environment)
        self.history = HistoryJournal(history_path)
        self.matcher = matcher or FzfMatcher()
        self.runner = runner or KubectlRunner(config.kube.exec, self.environ)
        self.contexts = ContextResolver(self.store, self.history, self.matcher, environment)
        self.namespaces = NamespaceResolver(
            config.alias_matcher, self.history, self.matcher, self.runner,
            update_context=config.kube.update_context,
        )
        self.emitter = SwitchProtocolEmitter(config.kube.cmd, config.kube.export_kubeconfig)

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None, config: Optional[Config] = None,
                     **kwargs) -> "SwitchSession":
        """Builds a session from the process environment, loading the config unless given."""
        environ = os.environ if environ is None else environ
        if config is None:
            config = load_config(environ)
        home = environ.get("HOME")
        if not home:
            raise ConfigError("$HOME env not found in your system, please make sure that you are in an UNIX system")
        environment = EnvironmentState.from_environ(environ)
        logger.debug(f"Session: store '{config.kube.dir}', current '{environment.current_name}'")
        return cls(config, environment, HistoryJournal.default_path(home), environ=environ, **kwargs)

    def switch_result(self, context: KubeContext) -> SwitchResult:
        return SwitchResult.from_context(context, self.config.kube.exec)

    def switch_to(self, context: KubeContext) -> None:
        """Records the switch in history, then tells the shell about it."""
        self.history.append(context.name, context.namespace)
        self.emitter.emit(self.switch_result(context), self.out)

    def clean(self) -> None:
        self.emitter.emit(CleanResult(), self.out)

    def info(self, message: str) -> None:
        print(message, file=self.err)
