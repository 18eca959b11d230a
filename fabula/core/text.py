"""Rendering of descriptive text.

A text is either a plain string or a set of fragments. Fragment selection:

1. drop fragments whose ``when`` conditions fail
2. keep only the highest ``priority`` among the survivors (default 0)
3. within that tier keep the first fragment of each ``group``;
   ungrouped fragments are all kept
4. join the kept fragments with a blank line

Once gates used by kept fragments are consumed; gates of dropped
fragments are not. ``{turns}`` is replaced by the turn counter.
"""
from __future__ import annotations
from typing import List, Optional, Sequence, Set, Tuple

from .dsl import check_all, commit_marks
from .model import DescriptiveText, Fragment, Text
from .registry import ContentRegistry
from .state import GameState

__all__ = ["render_text", "render_fragments", "interpolate", "FRAGMENT_SEPARATOR"]

FRAGMENT_SEPARATOR = "\n\n"


def interpolate(text: str, state: GameState) -> str:
    return text.replace("{turns}", str(state.turn_count))


def render_fragments(fragments: Sequence[Fragment], state: GameState, registry: ContentRegistry) -> str:
    passing: List[Tuple[Fragment, List[str]]] = []
    for fragment in fragments:
        result = check_all(fragment.when, state, registry)
        if result.passed:
            passing.append((fragment, result.once_marks))
    if not passing:
        return ""

    top = max(fragment.priority for fragment, _ in passing)
    used_groups: Set[str] = set()
    lines: List[str] = []
    for fragment, marks in passing:
        if fragment.priority != top:
            continue
        if fragment.group:
            if fragment.group in used_groups:
                continue
            used_groups.add(fragment.group)
        lines.append(fragment.say)
        commit_marks(marks, state)
    return FRAGMENT_SEPARATOR.join(lines)


def render_text(text: Optional[Text], state: GameState, registry: ContentRegistry) -> str:
    if text is None:
        return ""
    if isinstance(text, DescriptiveText):
        return interpolate(render_fragments(text.fragments, state, registry), state)
    return interpolate(text, state)
