"""Command-name completion for the line editor."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from command import BUILTIN_NAMES, list_executables, search_path


@dataclass
class Completion:
    """Result of one completion request.

    ``suffix`` is set when exactly one candidate matches; ``matches`` is
    filled only when the same ambiguous prefix is asked for a second time.
    """
    suffix: Optional[str] = None
    matches: List[str] = field(default_factory=list)


class Completer:
    """Completes the first word of a line against built-ins and $PATH.

    The candidate set is rebuilt on every request, so executables installed
    after startup show up immediately.
    """

    def __init__(self, builtin_names: Iterable[str] = BUILTIN_NAMES, path: Optional[str] = None) -> None:
        self.builtin_names = tuple(builtin_names)
        self.path = path

    def candidates(self, prefix: str) -> List[str]:
        """Sorted names that extend ``prefix``. Executables on the search
        path are only consulted when no built-in matches."""
        if not prefix or ' ' in prefix:
            return []
        found = {name for name in self.builtin_names if _extends(name, prefix)}
        if not found:
            for directory in search_path(self.path):
                found.update(name for name in list_executables(directory) if _extends(name, prefix))
        return sorted(found)

    def complete(self, prefix: str, attempt: int) -> Completion:
        matches = self.candidates(prefix)
        if len(matches) == 1:
            return Completion(suffix=matches[0][len(prefix):])
        if len(matches) > 1 and attempt > 1:
            return Completion(matches=matches)
        return Completion()


def _extends(name: str, prefix: str) -> bool:
    return name.startswith(prefix) and name != prefix
