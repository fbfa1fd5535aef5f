"""Structural comparison of recorded output traces."""

import json
from typing import List, Sequence, Tuple

from ..sandbox.results import OutputEvent, PathResult
from .schemas import Mode


def canonical_trace(trace: Sequence[OutputEvent]) -> str:
    """Serialize a trace keeping event order, argument order and delays."""
    return json.dumps(
        [[list(event.args), float(event.delay)] for event in trace],
        ensure_ascii=False,
        separators=(',', ':'),
    )


class TraceComparator:
    """Decides interference vs. collapse purely from recorded output.

    Return values are never consulted: two paths that print the same
    thing at the same simulated delays are indistinguishable even if they
    computed different numbers.
    """

    def classify(self, paths: Sequence[PathResult]) -> Mode:
        if len(paths) <= 1:
            return Mode.INTERFERENCE
        first = canonical_trace(paths[0].trace)
        for path in paths[1:]:
            if canonical_trace(path.trace) != first:
                return Mode.COLLAPSE
        return Mode.INTERFERENCE

    def divergent_pairs(self, paths: Sequence[PathResult]) -> List[Tuple[int, int]]:
        """All (i, j), i < j, whose traces differ."""
        forms = [canonical_trace(p.trace) for p in paths]
        return [
            (i, j)
            for i in range(len(forms))
            for j in range(i + 1, len(forms))
            if forms[i] != forms[j]
        ]

    @staticmethod
    def common_observation(paths: Sequence[PathResult]) -> str:
        """Text of path 0's first event, or "" when nothing was recorded."""
        if not paths or not paths[0].trace:
            return ""
        return paths[0].trace[0].text()
