"""
kubeswitch Store Package.
Filesystem access to the directory of stored kubeconfig files.
"""
from .credential_store import CredentialStore

__all__ = ['CredentialStore']
