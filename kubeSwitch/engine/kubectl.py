# kubeSwitch/engine/kubectl.py
"""
Runs the configured kubectl-compatible executable against one kubeconfig file.
"""
import logging
import os
import subprocess
from typing import List, Mapping, Optional, Sequence

from kubeSwitch.constants import ENV_KUBECONFIG
from kubeSwitch.errors import ExternalCommandError

logger = logging.getLogger(__name__)


class KubectlRunner:
    """
    Executes `<exec> <args...>` with KUBECONFIG pointing at a credential file.

    stdin stays attached to the terminal so auth plugins can prompt; stdout and
    stderr are captured.
    """

    def __init__(self, executable: str, environ: Optional[Mapping[str, str]] = None):
        self.executable = executable
        self.environ = dict(os.environ if environ is None else environ)

    def run(self, kubeconfig_path: str, args: Sequence[str]) -> str:
        """
        Runs the command and returns its trimmed stdout.

        Raises:
            ExternalCommandError: if the executable is missing or exits non-zero.
        """
        command = [self.executable, *args]
        env = dict(self.environ)
        env[ENV_KUBECONFIG] = kubeconfig_path
        printable = " ".join(command)
        logger.debug(f"Executing: {printable} (KUBECONFIG={kubeconfig_path})")
        try:
            result = subprocess.run(command, capture_output=True, text=True, env=env, check=False)
        except FileNotFoundError as e:
            raise ExternalCommandError(
                f"'{self.executable}' command not found. Please ensure it is installed and in your PATH.",
                command=self.executable, args=list(args),
            ) from e
        except OSError as e:
            raise ExternalCommandError(f"execute command '{printable}': {e}",
                                       command=self.executable, args=list(args)) from e

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise ExternalCommandError(
                f"execute command '{printable}' failed with exit code {result.returncode}: {stderr}",
                command=self.executable, args=list(args), returncode=result.returncode, stderr=stderr,
            )
        return (result.stdout or "").strip()

    def run_lines(self, kubeconfig_path: str, args: Sequence[str]) -> List[str]:
        """Runs the command and returns its non-blank output lines, trimmed."""
        output = self.run(kubeconfig_path, args)
        return [line.strip() for line in output.splitlines() if line.strip()]
