"""
Path filtering for project-packer.

Combines the static directory/suffix denylists with rules parsed from an
ignore-pattern file. The rule matching is a small, deliberate subset of
gitignore: bare names, nested paths, exact file names and a single leading
`*` suffix wildcard. Negation (`!`), `**` and character classes are not
supported.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .config import DEFAULT_IGNORE_DIRS, DEFAULT_IGNORE_SUFFIXES, IgnoreRule
from .utils import normalize_path


def parse_ignore_rules(text: str) -> list[IgnoreRule]:
    """
    Parse ignore-pattern file text into rules.

    Blank lines and `#` comments are dropped. A trailing slash marks a
    directory rule and is removed from the pattern.

    Args:
        text: Raw ignore file content

    Returns:
        Rules in file order
    """
    rules = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        is_directory = line.endswith("/")
        pattern = line[:-1] if is_directory else line
        rules.append(IgnoreRule(pattern=pattern, is_directory=is_directory))
    return rules


def _matches_rule(rule: IgnoreRule, path: str, parts: list[str], file_name: str) -> bool:
    pattern = rule.pattern
    if not pattern:
        return False

    if pattern in parts:
        return True

    if "/" in pattern:
        nested = pattern.lstrip("/")
        if nested and (
            path == nested
            or path.startswith(nested + "/")
            or f"/{nested}/" in path
        ):
            return True

    if file_name == pattern:
        return True

    if pattern.startswith("*") and file_name.endswith(pattern[1:]):
        return True

    return False


def should_ignore(
    path: str,
    rules: Iterable[IgnoreRule] = (),
    *,
    ignore_dirs: Iterable[str] = DEFAULT_IGNORE_DIRS,
    ignore_suffixes: Iterable[str] = DEFAULT_IGNORE_SUFFIXES,
) -> bool:
    """
    Decide whether a candidate path is excluded from a bundle.

    Args:
        path: Relative path, forward- or back-slash separated
        rules: Active ignore rules (see `parse_ignore_rules`)
        ignore_dirs: Directory names excluded anywhere in the path
        ignore_suffixes: File-name suffixes to exclude (case-insensitive)

    Returns:
        True if the path should be left out
    """
    path = normalize_path(path)
    parts = path.split("/")
    file_name = parts[-1]

    dir_set = ignore_dirs if isinstance(ignore_dirs, (set, frozenset)) else set(ignore_dirs)
    if any(part in dir_set for part in parts):
        return True

    lowered = file_name.lower()
    if any(lowered.endswith(suffix.lower()) for suffix in ignore_suffixes):
        return True

    return any(_matches_rule(rule, path, parts, file_name) for rule in rules)


@dataclass(frozen=True)
class PathFilter:
    """
    Immutable bundle of everything `should_ignore` needs.

    Loading a new ignore file yields a new filter with the rule set replaced
    wholesale; rules are never merged across files.
    """

    rules: tuple[IgnoreRule, ...] = ()
    ignore_dirs: frozenset[str] = DEFAULT_IGNORE_DIRS
    ignore_suffixes: tuple[str, ...] = DEFAULT_IGNORE_SUFFIXES

    def with_rules(self, rules: Iterable[IgnoreRule]) -> PathFilter:
        """Return a copy whose active rule set is exactly `rules`."""
        return PathFilter(
            rules=tuple(rules),
            ignore_dirs=self.ignore_dirs,
            ignore_suffixes=self.ignore_suffixes,
        )

    def with_ignore_text(self, text: str) -> PathFilter:
        """Return a copy whose rules are parsed from ignore file `text`."""
        return self.with_rules(parse_ignore_rules(text))

    def should_ignore(self, path: str) -> bool:
        return should_ignore(
            path,
            self.rules,
            ignore_dirs=self.ignore_dirs,
            ignore_suffixes=self.ignore_suffixes,
        )
