"""Exception taxonomy for posterior prediction.

Two structural failures abort a run:

* :class:`InputShapeError` — a design matrix and its draw matrix
  disagree on dimensions or column labels in a way that label
  alignment cannot resolve.
* :class:`MissingDataError` — an upstream artifact (fixed-effect
  draws, a named random-effect group, a draw block) is absent.

Per-observation numeric problems (missing values inside a draw row)
are not errors: the summarizer skips them and reports the counts on
the result.
"""

from __future__ import annotations


class SAEMortalityError(Exception):
    """Base class for structural errors raised by this package."""


class InputShapeError(SAEMortalityError, ValueError):
    """Design/draw dimension or label mismatch.

    Args:
        message: Human-readable description.
        group: Name of the offending effect group (``"fixed"`` for the
            fixed-effect block).
        dimension: Which dimension disagreed (``"rows"``,
            ``"columns"``, ``"draws"`` or ``"labels"``).
    """

    def __init__(
        self,
        message: str,
        *,
        group: str | None = None,
        dimension: str | None = None,
    ) -> None:
        super().__init__(message)
        self.group = group
        self.dimension = dimension


class MissingDataError(SAEMortalityError, KeyError):
    """A required upstream artifact is absent."""

    def __init__(self, message: str, *, name: str | None = None) -> None:
        super().__init__(message)
        self.name = name

    def __str__(self) -> str:
        # KeyError repr-quotes its argument; keep the message readable.
        return str(self.args[0]) if self.args else ""
