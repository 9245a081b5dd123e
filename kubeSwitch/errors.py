# kubeSwitch/errors.py
"""
Exception hierarchy for kubeswitch.

Every failure the CLI reports to the user derives from KubeSwitchError so the
dispatcher can turn it into a single stderr line and a non-zero exit status.
"""

from typing import List, Optional


class KubeSwitchError(Exception):
    """Base class for all kubeswitch errors."""
    pass


class ConfigError(KubeSwitchError):
    """Raised when the configuration document cannot be loaded or validated."""
    pass


class StoreError(KubeSwitchError):
    """Raised on filesystem failures inside the credential store or history."""

    def __init__(self, action: str, path: Optional[str] = None, reason: Optional[str] = None):
        self.path = path
        self.reason = reason
        message = action
        if path:
            message = f"{message} '{path}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class LinkFormatError(KubeSwitchError):
    """Raised when a link spec is not '<source>:<target>'."""
    pass


class EditError(KubeSwitchError):
    """Raised when an edit session produces unusable content."""
    pass


class ResolutionError(KubeSwitchError):
    """Raised when a context or namespace cannot be resolved."""
    pass


class ContextNotFoundError(ResolutionError):
    pass


class EmptyCandidatesError(ResolutionError):
    pass


class NoHistoryError(ResolutionError):
    pass


class ExternalCommandError(ResolutionError):
    """Raised when an external command (kubectl, editor) fails."""

    def __init__(self, message: str, command: Optional[str] = None, args: Optional[List[str]] = None,
                 returncode: Optional[int] = None, stderr: str = ""):
        self.command = command
        self.args_list = list(args or [])
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


class MatcherError(ResolutionError):
    """Raised when the interactive matcher fails to produce a selection."""
    pass


class MatcherMissingError(MatcherError):
    pass


class NoMatchError(MatcherError):
    pass


class SelectionCancelledError(MatcherError):
    pass
