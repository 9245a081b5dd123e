# kubeSwitch/engine/namespace.py
"""
Namespace listing, selection and (optionally persisted) assignment for a context.
"""
import logging
from typing import List, Optional

from kubeSwitch.constants import KUBECTL_LIST_NAMESPACES_ARGS, QUERY_PREVIOUS
from kubeSwitch.core.context import KubeContext
from kubeSwitch.core.ns_alias import AliasMatcher
from kubeSwitch.engine.fzf import InteractiveMatcher
from kubeSwitch.engine.history import HistoryJournal
from kubeSwitch.engine.kubectl import KubectlRunner
from kubeSwitch.errors import EmptyCandidatesError, NoHistoryError

logger = logging.getLogger(__name__)


class NamespaceResolver:
    def __init__(self, alias_matcher: AliasMatcher, history: HistoryJournal, matcher: InteractiveMatcher,
                 runner: KubectlRunner, update_context: bool = False):
        self.alias_matcher = alias_matcher
        self.history = history
        self.matcher = matcher
        self.runner = runner
        self.update_context = update_context

    def list_namespaces(self, context: KubeContext) -> List[str]:
        """
        Namespaces to offer for a context.

        A matching `ns_alias` rule answers without touching the cluster;
        otherwise kubectl is asked with the context's kubeconfig.
        """
        aliases = self.alias_matcher.match(context.name)
        if aliases is not None:
            return aliases
        return self.runner.run_lines(context.path, KUBECTL_LIST_NAMESPACES_ARGS)

    def select_namespace(self, context: KubeContext, query: Optional[str] = None) -> str:
        """
        Resolves a namespace query for a context.

        Args:
            context: The context whose namespace changes.
            query: "-" for the previous namespace, a literal namespace (taken
                as is), or None for interactive selection.

        Returns:
            The selected namespace.
        """
        if query == QUERY_PREVIOUS:
            return self.select_namespace_history(context)
        if query:
            return query

        namespaces = [ns for ns in self.list_namespaces(context) if ns != context.namespace]
        if not namespaces:
            raise EmptyCandidatesError(f"no namespace to select for '{context.name}'")
        return namespaces[self.matcher.select(namespaces)]

    def select_namespace_history(self, context: KubeContext) -> str:
        for entry in self.history.entries():
            if entry.name == context.name and entry.namespace != context.namespace:
                return entry.namespace
        raise NoHistoryError(f"no namespace history to select for '{context.name}'")

    def set_namespace(self, context: KubeContext, namespace: str) -> KubeContext:
        """Assigns the namespace; with `kube.update_context` it is also written into the kubeconfig."""
        context.namespace = namespace
        if self.update_context:
            self.runner.run(context.path, ["config", "set-context", "--current", f"--namespace={namespace}"])
            logger.info(f"Persisted namespace '{namespace}' into '{context.path}'")
        return context
