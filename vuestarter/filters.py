"""Conditional file inclusion.

Each filter rule pairs a path glob with a predicate.  A template file is
emitted when every rule whose glob matches its path evaluates to true.  A
file that no rule matches is always emitted.

Glob syntax (paths are POSIX-style and relative to the template root):

* ``**`` matches any number of path segments, including none
* ``*`` matches any run of characters within one segment
* ``?`` matches a single character other than ``/``
* everything else matches literally, dotfiles included
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from functools import lru_cache
from typing import Any

from .schema import FilterRule

# Policy for paths that no rule mentions.
DEFAULT_INCLUDE = True


@lru_cache(maxsize=256)
def glob_to_regex(glob: str) -> re.Pattern[str]:
    """Translate a path glob into a compiled, fully anchored regex."""
    segments = glob.strip("/").split("/")
    parts: list[str] = []
    for index, segment in enumerate(segments):
        last = index == len(segments) - 1
        if segment == "**":
            parts.append(".*" if last else "(?:[^/]+/)*")
            continue
        pattern = ""
        for char in segment:
            if char == "*":
                pattern += "[^/]*"
            elif char == "?":
                pattern += "[^/]"
            else:
                pattern += re.escape(char)
        parts.append(pattern if last else pattern + "/")
    return re.compile("".join(parts) + r"\Z")


def match_path(path: str, glob: str) -> bool:
    """Return ``True`` if the relative POSIX *path* matches *glob*."""
    return glob_to_regex(glob).match(path.strip("/")) is not None


class FileFilter:
    """Applies a filter table to template paths."""

    def __init__(self, rules: Sequence[FilterRule]) -> None:
        self.rules = tuple(rules)

    def matching_rules(self, path: str) -> list[FilterRule]:
        return [rule for rule in self.rules if match_path(path, rule.glob)]

    def includes(self, path: str, answers: Mapping[str, Any]) -> bool:
        """Decide whether *path* survives into the generated project."""
        rules = self.matching_rules(path)
        if not rules:
            return DEFAULT_INCLUDE
        return all(rule.predicate.evaluate(answers) for rule in rules)

    def apply(self, paths: Iterable[str], answers: Mapping[str, Any]) -> list[str]:
        """Return the subset of *paths* to emit, in their original order."""
        return [path for path in paths if self.includes(path, answers)]

    def excluded(self, paths: Iterable[str], answers: Mapping[str, Any]) -> list[str]:
        return [path for path in paths if not self.includes(path, answers)]

    def unmatched_rules(self, paths: Iterable[str]) -> list[FilterRule]:
        """Rules whose glob matches none of *paths*."""
        path_list = list(paths)
        return [
            rule
            for rule in self.rules
            if not any(match_path(path, rule.glob) for path in path_list)
        ]
