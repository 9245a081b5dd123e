"""
kubeswitch Core Context Module

Context types resolved per invocation.
"""

from .kube_context import EnvironmentState, KubeContext

__all__ = ['EnvironmentState', 'KubeContext']
