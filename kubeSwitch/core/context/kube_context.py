# kubeSwitch/core/context/kube_context.py
"""
Context types for one kubeswitch invocation.

KubeContext is the resolved view of one stored kubeconfig file. EnvironmentState
captures what the parent shell declared as active; it is read once at the CLI
boundary and handed to everything else explicitly.
"""
from dataclasses import dataclass
from typing import Mapping, Optional

from kubeSwitch.constants import DEFAULT_NAMESPACE, ENV_CURRENT_NAME, ENV_CURRENT_NAMESPACE


@dataclass(frozen=True)
class EnvironmentState:
    """The context and namespace the parent shell currently considers active."""
    current_name: Optional[str] = None
    current_namespace: Optional[str] = None

    @classmethod
    def from_environ(cls, environ: Mapping[str, str]) -> "EnvironmentState":
        name = environ.get(ENV_CURRENT_NAME) or None
        namespace = environ.get(ENV_CURRENT_NAMESPACE) or None
        return cls(current_name=name, current_namespace=namespace)

    def is_current(self, name: str) -> bool:
        return self.current_name is not None and self.current_name == name

    def effective_namespace(self, on_disk: Optional[str]) -> str:
        """Namespace of the current context: declared value first, then the file's."""
        if self.current_namespace:
            return self.current_namespace
        return on_disk or DEFAULT_NAMESPACE


@dataclass
class KubeContext:
    name: str
    path: str
    namespace: str = DEFAULT_NAMESPACE
    current: bool = False
    alias_link: Optional[str] = None

    @classmethod
    def build(cls, name: str, path: str, namespace: Optional[str], alias_link: Optional[str],
              environment: EnvironmentState) -> "KubeContext":
        """
        Builds a context, applying the current-context rule.

        A context is current when its name equals the declared name; its
        namespace is then the declared namespace if one is set.
        """
        if environment.is_current(name):
            return cls(name=name, path=path, namespace=environment.effective_namespace(namespace),
                       current=True, alias_link=alias_link)
        return cls(name=name, path=path, namespace=namespace or DEFAULT_NAMESPACE,
                   current=False, alias_link=alias_link)

    @property
    def display(self) -> str:
        link = f" ({self.alias_link})" if self.alias_link else ""
        return f"{self.name}{link} -> {self.namespace}"

    def __str__(self):
        return self.display
