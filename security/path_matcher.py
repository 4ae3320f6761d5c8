"""
Glob matching of request paths against rule uriPatterns.

Patterns are matched segment by segment:
  **          any number of segments, including none
  *           one whole segment, or any run of characters inside a segment (a*b)
  ?           exactly one character inside a segment
  {name}      one segment captured as a template variable; {name:regex} restricts it,
              and the regex may use one level of braces ({id:[0-9]{3}})
Everything else matches literally and case-sensitively.
"""
import re
from functools import lru_cache
from typing import List, Optional, Pattern, Sequence

DOUBLE_WILDCARD = "**"
_TOKEN = re.compile(r"\{(?:[^/{}]|\{[^/{}]*\})+\}|\*|\?")


def _split(path: str) -> List[str]:
    return [segment for segment in path.split("/") if segment]


@lru_cache(maxsize=1024)
def _segment_regex(segment: str) -> Pattern:
    parts = []
    position = 0
    for token in _TOKEN.finditer(segment):
        parts.append(re.escape(segment[position:token.start()]))
        text = token.group()
        if text == "*":
            parts.append(".*")
        elif text == "?":
            parts.append(".")
        else:
            _, _, constraint = text[1:-1].partition(":")
            parts.append(f"(?:{constraint})" if constraint else ".*")
        position = token.end()
    parts.append(re.escape(segment[position:]))
    return re.compile("".join(parts))


def _match_segment(pattern_segment: str, path_segment: str) -> bool:
    if pattern_segment == path_segment:
        return True
    return _segment_regex(pattern_segment).fullmatch(path_segment) is not None


def _match(pattern: Sequence[str], path: Sequence[str]) -> bool:
    # reachable[j]: pattern prefix consumed so far can end right before path[j]
    reachable = [True] + [False] * len(path)
    for segment in pattern:
        if segment == DOUBLE_WILDCARD:
            for j in range(1, len(path) + 1):
                reachable[j] = reachable[j] or reachable[j - 1]
            continue
        next_reachable = [False] * (len(path) + 1)
        for j in range(1, len(path) + 1):
            next_reachable[j] = reachable[j - 1] and _match_segment(segment, path[j - 1])
        reachable = next_reachable
        if not any(reachable):
            return False
    return reachable[len(path)]


def match_path(pattern: Optional[str], path: Optional[str]) -> bool:
    """Whether `path` matches the glob `pattern`; a leading / is required on both."""
    if not pattern or not path:
        return False
    if pattern.startswith("/") != path.startswith("/"):
        return False
    return _match(_split(pattern), _split(path))
