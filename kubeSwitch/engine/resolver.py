# kubeSwitch/engine/resolver.py
"""
Turns a user query into exactly one KubeContext.

Query forms:
    "-"          the most recent context from history other than the current one
    "dir/"       interactive selection among contexts below `dir`
    "name"       direct lookup in the store
    (nothing)    the current context, or interactive selection among all
"""
import logging
from enum import Enum
from typing import List, Optional

from kubeSwitch.constants import QUERY_DIR_SUFFIX, QUERY_PREVIOUS
from kubeSwitch.core.context import EnvironmentState, KubeContext
from kubeSwitch.engine.fzf import InteractiveMatcher
from kubeSwitch.engine.history import HistoryJournal
from kubeSwitch.errors import ContextNotFoundError, EmptyCandidatesError, NoHistoryError, ResolutionError
from kubeSwitch.store.credential_store import CredentialStore

logger = logging.getLogger(__name__)


class SelectMode(Enum):
    # The context must exist; with no query the current context is used.
    GET_REQUIRED = "get_required"
    # A missing name yields a new, not-yet-stored context.
    GET_NOT_REQUIRED = "get_not_required"
    # Choosing a context to switch to; the current one is never offered.
    SWITCH = "switch"


class ContextResolver:
    """
    Resolves context queries against the store, the history and the user.

    Args:
        store: The credential store.
        history: The switch history, consulted for "-".
        matcher: Interactive matcher for ambiguous queries.
        environment: The context the shell declares as current.
    """

    def __init__(self, store: CredentialStore, history: HistoryJournal, matcher: InteractiveMatcher,
                 environment: Optional[EnvironmentState] = None):
        self.store = store
        self.history = history
        self.matcher = matcher
        self.environment = environment or EnvironmentState()

    def resolve(self, query: Optional[str], mode: SelectMode) -> KubeContext:
        if query == QUERY_PREVIOUS:
            return self._by_history()
        if query and query.endswith(QUERY_DIR_SUFFIX):
            return self._by_directory(query, mode)
        if query:
            return self._by_name(query, mode)

        if mode != SelectMode.SWITCH and self.environment.current_name:
            logger.debug(f"No query, using current context '{self.environment.current_name}'")
            return self.current()
        candidates = self.store.list()
        return self._interactive(self._filter(candidates, mode), prefix="", where="the store")

    def current(self) -> KubeContext:
        """The context the shell declares as current."""
        context = self.store.current()
        if context is None:
            raise ResolutionError("you are not in any kubeconfig, please switch to one first")
        return context

    def _by_history(self) -> KubeContext:
        for entry in self.history.entries():
            if self.environment.is_current(entry.name):
                continue
            if self.store.is_directory(entry.name):
                logger.debug(f"History: '{entry.name}' is now a directory, skipping")
                continue
            context = self.store.load(entry.name)
            if context is None:
                logger.debug(f"History: '{entry.name}' no longer exists, skipping")
                continue
            context.namespace = entry.namespace
            return context
        raise NoHistoryError("no history to select")

    def _by_directory(self, query: str, mode: SelectMode) -> KubeContext:
        prefix = query.strip(QUERY_DIR_SUFFIX)
        candidates = self._filter(self.store.list(prefix or None), mode)
        return self._interactive(candidates, prefix=prefix, where=f"'{query}'")

    def _by_name(self, name: str, mode: SelectMode) -> KubeContext:
        context = self.store.load(name)
        if context is not None:
            return context
        if mode == SelectMode.GET_NOT_REQUIRED:
            logger.debug(f"Context '{name}' does not exist yet, creating a new descriptor")
            return self.store.new_context(name)
        raise ContextNotFoundError(f"cannot find kubeconfig '{name}'")

    @staticmethod
    def _filter(candidates: List[KubeContext], mode: SelectMode) -> List[KubeContext]:
        if mode == SelectMode.SWITCH:
            return [c for c in candidates if not c.current]
        return candidates

    def _interactive(self, candidates: List[KubeContext], prefix: str, where: str) -> KubeContext:
        if not candidates:
            raise EmptyCandidatesError(f"no kubeconfig to select in {where}")
        labels = [self._label(c.name, prefix) for c in candidates]
        index = self.matcher.select(labels)
        return candidates[index]

    @staticmethod
    def _label(name: str, prefix: str) -> str:
        if prefix and name.startswith(prefix + "/"):
            return name[len(prefix) + 1:]
        return name
