"""
kubeswitch: switch between stored kubeconfig files and namespaces from the shell.
"""
from kubeSwitch.__version__ import __version__

__all__ = ['__version__']
