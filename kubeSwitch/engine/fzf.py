# kubeSwitch/engine/fzf.py
"""
Interactive selection through an external fuzzy finder.

The matcher receives an ordered list of unique labels and returns the index of
the chosen one. A missing tool, a cancelled prompt and "no match" are distinct
errors so callers can tell them apart.
"""
import logging
import subprocess
import sys
from abc import ABC, abstractmethod
from typing import Sequence

from kubeSwitch.constants import FZF_EXECUTABLE, FZF_EXIT_CANCELED, FZF_EXIT_ERROR, FZF_EXIT_NO_MATCH
from kubeSwitch.errors import MatcherError, MatcherMissingError, NoMatchError, SelectionCancelledError

logger = logging.getLogger(__name__)


class InteractiveMatcher(ABC):
    """Interface for anything that lets the user pick one item from a list."""

    @abstractmethod
    def select(self, labels: Sequence[str]) -> int:
        """
        Lets the user pick one label.

        Args:
            labels: Ordered, unique labels to choose from.

        Returns:
            The 0-based index of the selected label.

        Raises:
            MatcherError: or one of its subclasses when nothing was selected.
        """
        pass


class FzfMatcher(InteractiveMatcher):
    """Runs `fzf` with the labels on stdin; the terminal stays attached through stderr."""

    def __init__(self, executable: str = FZF_EXECUTABLE):
        self.executable = executable

    def select(self, labels: Sequence[str]) -> int:
        if not labels:
            raise NoMatchError(f"{self.executable}: nothing to select from")
        payload = "".join(f"{label}\n" for label in labels)
        logger.debug(f"Launching {self.executable} with {len(labels)} item(s)")
        try:
            result = subprocess.run(
                [self.executable],
                input=payload,
                stdout=subprocess.PIPE,
                stderr=sys.stderr,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            raise MatcherMissingError(
                f"cannot find {self.executable} in your system, please install it first"
            ) from e
        except OSError as e:
            raise MatcherError(f"failed to launch {self.executable}: {e}") from e

        code = result.returncode
        if code == 0:
            chosen = result.stdout.strip()
            for index, label in enumerate(labels):
                if label == chosen:
                    return index
            raise MatcherError(f"cannot find key '{chosen}' from {self.executable} output")
        if code == FZF_EXIT_NO_MATCH:
            raise NoMatchError(f"{self.executable} no match found")
        if code == FZF_EXIT_ERROR:
            raise MatcherError(f"{self.executable} returned an error")
        if code == FZF_EXIT_CANCELED:
            raise SelectionCancelledError(f"{self.executable} canceled")
        if code < 0 or 128 <= code <= 254:
            raise MatcherError(f"{self.executable} was terminated")
        raise MatcherError(f"{self.executable} returned an unknown error (exit code {code})")
