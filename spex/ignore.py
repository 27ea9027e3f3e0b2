"""
Export ignore patterns for spex packages.

A package lists glob patterns under ``export.ignores`` in its own
``.spex/spex.yml``. When the package is imported elsewhere, paths under
its ``spex/`` directory that match any pattern are left out.

Pattern syntax:
    *       any run of characters within one path segment (dotfiles included)
    ?       one character within a segment
    [abc]   character class, ``[!abc]`` negated
    {a,b}   alternatives
    **      any number of whole segments, including none

Patterns are anchored at the package's specification root: ``*.tmp``
matches ``notes.tmp`` but not ``drafts/notes.tmp``; use ``**/*.tmp`` for
every level.
"""

import re
from typing import Iterable, List, Pattern


def normalize_glob_path(path: str) -> str:
    """Forward slashes, no leading or trailing slash."""
    return path.replace('\\', '/').strip('/')


def _expand_braces(pattern: str) -> List[str]:
    match = re.search(r'\{([^{}]*,[^{}]*)\}', pattern)
    if not match:
        return [pattern]
    head, tail = pattern[:match.start()], pattern[match.end():]
    expanded = []
    for alternative in match.group(1).split(','):
        expanded.extend(_expand_braces(head + alternative + tail))
    return expanded


def _translate_segment(segment: str) -> str:
    """Regex for one path segment (no slashes)."""
    if segment == '*':
        return '[^/]+'

    i, n = 0, len(segment)
    out = []
    while i < n:
        c = segment[i]
        i += 1
        if c == '*':
            while i < n and segment[i] == '*':
                i += 1
            out.append('[^/]*')
        elif c == '?':
            out.append('[^/]')
        elif c == '[':
            j = i
            if j < n and segment[j] in '!^':
                j += 1
            if j < n and segment[j] == ']':
                j += 1
            while j < n and segment[j] != ']':
                j += 1
            if j >= n:
                out.append('\\[')
                continue
            body = segment[i:j].replace('\\', '\\\\')
            i = j + 1
            if body[0] in '!^':
                body = '^/' + body[1:]
            out.append(f'[{body}]')
        elif c == '\\' and i < n:
            out.append(re.escape(segment[i]))
            i += 1
        else:
            out.append(re.escape(c))
    return ''.join(out)


def _translate(pattern: str) -> str:
    segments = pattern.split('/')
    parts = []
    for index, segment in enumerate(segments):
        last = index == len(segments) - 1
        if segment == '**':
            parts.append('.*' if last else '(?:[^/]+/)*')
        else:
            parts.append(_translate_segment(segment) + ('' if last else '/'))
    return ''.join(parts)


class IgnorePattern:
    """One compiled glob pattern."""

    def __init__(self, pattern: str):
        self.pattern = normalize_glob_path(pattern.strip())
        self._regexes: List[Pattern[str]] = [
            re.compile(_translate(alternative), re.DOTALL)
            for alternative in _expand_braces(self.pattern)
        ]

    def matches(self, relative_path: str) -> bool:
        return any(regex.fullmatch(relative_path) for regex in self._regexes)

    def matches_directory(self, relative_path: str) -> bool:
        """
        True if the directory itself matches, or if the pattern covers
        everything below it (``build/**`` covers ``build``).
        """
        return self.matches(relative_path) or self.matches(relative_path + '/')

    def __repr__(self) -> str:
        return f"IgnorePattern({self.pattern!r})"


class IgnoreMatcher:
    """
    A set of compiled patterns, queried with paths relative to a
    package's specification root.

    Example:
        matcher = compile_patterns(["**/*.pyc", "build/**"])
        matcher.matches_file("lib/mod.pyc")     # True
        matcher.matches_directory("build/out")  # True (ancestor matches)
    """

    def __init__(self, patterns: List[IgnorePattern]):
        self.patterns = patterns

    def __bool__(self) -> bool:
        return bool(self.patterns)

    def __len__(self) -> int:
        return len(self.patterns)

    def matches_file(self, relative_path: str) -> bool:
        path = normalize_glob_path(relative_path)
        if not path:
            return False
        return any(pattern.matches(path) for pattern in self.patterns)

    def matches_directory(self, relative_path: str) -> bool:
        """True if the directory or any of its ancestors is excluded."""
        path = normalize_glob_path(relative_path)
        if not path:
            return False
        segments = path.split('/')
        for depth in range(1, len(segments) + 1):
            prefix = '/'.join(segments[:depth])
            if any(pattern.matches_directory(prefix) for pattern in self.patterns):
                return True
        return False


def compile_patterns(patterns: Iterable[str]) -> IgnoreMatcher:
    """
    Compile glob strings into an IgnoreMatcher.

    Blank patterns and ``#`` comments are skipped.
    """
    compiled = []
    for pattern in patterns:
        if not isinstance(pattern, str):
            continue
        stripped = pattern.strip()
        if not normalize_glob_path(stripped) or stripped.startswith('#'):
            continue
        compiled.append(IgnorePattern(stripped))
    return IgnoreMatcher(compiled)
