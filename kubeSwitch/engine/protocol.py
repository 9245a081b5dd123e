# kubeSwitch/engine/protocol.py
"""
The switch protocol: what the shell function reads from our stdout.

    __switch__
    <kube.cmd>
    <export_kubeconfig 0|1>
    1                                   (clean: stop here)
or
    0
    <name>
    <namespace>
    <display>
    <kube.exec>
    <absolute kubeconfig path>
"""
import sys
from dataclasses import dataclass
from typing import List, Optional, TextIO, Union

from kubeSwitch.constants import FLAG_OFF, FLAG_ON, SWITCH_SENTINEL
from kubeSwitch.core.context import KubeContext


@dataclass(frozen=True)
class SwitchResult:
    name: str
    namespace: str
    display: str
    executable: str
    kubeconfig_path: str

    @classmethod
    def from_context(cls, context: KubeContext, executable: str) -> "SwitchResult":
        return cls(
            name=context.name,
            namespace=context.namespace,
            display=context.display,
            executable=executable,
            kubeconfig_path=context.path,
        )


@dataclass(frozen=True)
class CleanResult:
    pass


ProtocolResult = Union[SwitchResult, CleanResult]


class SwitchProtocolEmitter:
    def __init__(self, alias_cmd: str, export_kubeconfig: bool = False):
        self.alias_cmd = alias_cmd
        self.export_kubeconfig = export_kubeconfig

    def render(self, result: ProtocolResult) -> List[str]:
        lines = [SWITCH_SENTINEL, self.alias_cmd, FLAG_ON if self.export_kubeconfig else FLAG_OFF]
        if isinstance(result, CleanResult):
            lines.append(FLAG_ON)
            return lines
        if not isinstance(result, SwitchResult):
            raise TypeError(f"cannot render protocol result of type {type(result).__name__}")
        lines.append(FLAG_OFF)
        lines.extend([
            result.name,
            result.namespace,
            result.display,
            result.executable,
            result.kubeconfig_path,
        ])
        return lines

    def emit(self, result: ProtocolResult, stream: Optional[TextIO] = None) -> None:
        stream = stream or sys.stdout
        stream.write("".join(f"{line}\n" for line in self.render(result)))
        stream.flush()
