# kubeSwitch/core/ns_alias.py
"""
Namespace alias rules.

A rule matches a context name by regex or by an exact set of names and, on
match, supplies the namespace list to offer for that context instead of asking
the cluster. The first matching rule wins.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Any, FrozenSet, List, Mapping, Optional, Sequence

from kubeSwitch.errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AliasRule:
    alias: List[str]
    regex: Optional[str] = None
    names: FrozenSet[str] = field(default_factory=frozenset)
    _pattern: Optional[re.Pattern] = field(default=None, repr=False, compare=False)

    @classmethod
    def from_dict(cls, raw: Any, index: int = 0) -> "AliasRule":
        """
        Parses and validates one `ns_alias` entry.

        Raises:
            ConfigError: if the entry is not a mapping, declares neither a regex
                nor names, has an empty alias list or an invalid regex.
        """
        where = f"ns_alias index {index}"
        if not isinstance(raw, Mapping):
            raise ConfigError(f"{where}: expected a mapping, got {type(raw).__name__}")

        alias = raw.get("alias")
        if not isinstance(alias, list) or not alias:
            raise ConfigError(f"{where}: `ns_alias.alias` cannot be empty")
        if not all(isinstance(item, str) and item for item in alias):
            raise ConfigError(f"{where}: `ns_alias.alias` must contain non-empty strings")

        regex = raw.get("regex")
        pattern = None
        if regex is not None:
            if not isinstance(regex, str):
                raise ConfigError(f"{where}: `ns_alias.regex` must be a string")
            try:
                pattern = re.compile(regex)
            except re.error as e:
                raise ConfigError(f"{where}: parse ns_alias regex '{regex}': {e}") from e

        names = raw.get("names") or []
        if not isinstance(names, list) or not all(isinstance(name, str) for name in names):
            raise ConfigError(f"{where}: `ns_alias.names` must be a list of strings")

        if pattern is None and not names:
            raise ConfigError(f"{where}: ns_alias must have at least regex or names")

        return cls(alias=list(alias), regex=regex, names=frozenset(names), _pattern=pattern)

    def matches(self, name: str) -> bool:
        if self._pattern is not None and self._pattern.search(name):
            return True
        return name in self.names


class AliasMatcher:
    """Evaluates alias rules in declaration order."""

    def __init__(self, rules: Sequence[AliasRule] = ()):
        self.rules = list(rules)

    def match(self, name: str) -> Optional[List[str]]:
        for index, rule in enumerate(self.rules):
            if rule.matches(name):
                logger.debug(f"Context '{name}' matched ns_alias rule {index}")
                return list(rule.alias)
        return None
