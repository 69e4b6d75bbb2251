"""
Reduction tracing for symtree.

reduce_with_trace() records every pairwise merge the greedy reducer accepts,
in the order it accepts them (children before their parents).
"""

from typing import Dict, List, Optional

from .node import Kind, Node

_OPERATORS = {Kind.SUM: "+", Kind.PRODUCT: "*", Kind.POWER: "^"}


class MergeStep:
    """A single accepted merge: combine(kind, left, right) -> result."""

    def __init__(self, kind: Kind, left: Node, right: Node, result: Node):
        self.kind = kind
        self.left = left
        self.right = right
        self.result = result

    def __repr__(self) -> str:
        op = _OPERATORS[self.kind]
        return f"{self.kind.value}: ({self.left}) {op} ({self.right}) → {self.result}"

    def to_dict(self) -> Dict:
        """Convert step to dictionary for serialization."""
        return {
            "kind": self.kind.value,
            "left": str(self.left),
            "right": str(self.right),
            "result": str(self.result),
        }


class ReductionTrace:
    """
    A trace of all merges applied during one reduction.

    Provides multiple formatting options:
        - Default repr: verbose multi-line format
        - format("compact"): single line with the merge count
        - format("chain"): each merge result on its own line
        - to_dict(): JSON-serializable dictionary
    """

    def __init__(self):
        self.steps: List[MergeStep] = []
        self.initial: Optional[Node] = None
        self.final: Optional[Node] = None

    def add_step(self, step: MergeStep):
        self.steps.append(step)

    def format(self, style: str = "verbose") -> str:
        """
        Format the trace in different styles.

        Args:
            style: One of "verbose", "compact", "chain"

        Returns:
            Formatted string representation of the trace.
        """
        if style == "compact":
            return f"{self.initial} --[{len(self.steps)} merges]--> {self.final}"

        elif style == "chain":
            parts = [str(self.initial)]
            for step in self.steps:
                parts.append(f"  --({step.kind.value})--> {step.result}")
            parts.append(f"= {self.final}")
            return "\n".join(parts)

        elif style == "verbose":
            return repr(self)

        raise ValueError(f"Unknown trace style: {style}. "
                         f"Valid options: verbose, compact, chain")

    def __repr__(self) -> str:
        lines = [f"Initial: {self.initial}"]
        for i, step in enumerate(self.steps, 1):
            lines.append(f"  {i}. {step}")
        lines.append(f"Final: {self.final}")
        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self):
        """Iterate over merge steps."""
        return iter(self.steps)

    def __bool__(self) -> bool:
        """True if any merge was accepted."""
        return len(self.steps) > 0

    def to_dict(self) -> Dict:
        """Convert trace to dictionary for JSON serialization."""
        return {
            "initial": None if self.initial is None else str(self.initial),
            "final": None if self.final is None else str(self.final),
            "steps": [step.to_dict() for step in self.steps],
            "step_count": len(self.steps),
        }

    def kind_counts(self) -> Dict[str, int]:
        """Count merges per operator kind."""
        counts: Dict[str, int] = {}
        for step in self.steps:
            counts[step.kind.value] = counts.get(step.kind.value, 0) + 1
        return counts

    def summary(self) -> str:
        """Get a brief summary of the reduction."""
        if not self.steps:
            return "No merges performed"
        counts = self.kind_counts()
        detail = ", ".join(f"{count} {kind}" for kind, count in sorted(counts.items()))
        return f"{len(self.steps)} merges ({detail})"
