# kubeSwitch/engine/__init__.py
"""
kubeswitch engine package.
Resolves contexts and namespaces, keeps the switch history and talks to the
external tools (fzf, kubectl) on behalf of the CLI.
"""
from .history import HistoryJournal
from .namespace import NamespaceResolver
from .protocol import CleanResult, SwitchProtocolEmitter, SwitchResult
from .resolver import ContextResolver, SelectMode

__all__ = [
    'CleanResult',
    'ContextResolver',
    'HistoryJournal',
    'NamespaceResolver',
    'SelectMode',
    'SwitchProtocolEmitter',
    'SwitchResult',
]
