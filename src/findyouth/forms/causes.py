"""Cause selection with a maximum size."""

from __future__ import annotations

import logging

from findyouth.models.domain import CAUSE_AREAS, MAX_CAUSES

logger = logging.getLogger(__name__)


class CauseSelection:
    """Ordered set of selected causes, capped at max_causes.

    Adding beyond the cap is a no-op.
    """

    def __init__(
        self,
        selected: list[str] | None = None,
        max_causes: int = MAX_CAUSES,
        options: list[str] | None = None,
    ):
        self.max_causes = max_causes
        self.options = list(options) if options is not None else list(CAUSE_AREAS)
        self._selected: list[str] = []
        for cause in selected or []:
            self.add(cause)

    @property
    def selected(self) -> list[str]:
        return list(self._selected)

    @property
    def is_full(self) -> bool:
        return len(self._selected) >= self.max_causes

    def add(self, cause: str) -> bool:
        """Add a cause. Returns False if it was not added."""
        if cause not in self.options:
            raise ValueError(f"Unknown cause: {cause}")
        if cause in self._selected:
            return False
        if self.is_full:
            logger.debug(f"Cause selection full, ignoring {cause}")
            return False
        self._selected.append(cause)
        return True

    def remove(self, cause: str) -> bool:
        """Remove a cause. Returns False if it was not selected."""
        if cause not in self._selected:
            return False
        self._selected.remove(cause)
        return True

    def toggle(self, cause: str) -> bool:
        """Remove the cause if selected, otherwise try to add it.

        Returns:
            True if the selection changed.
        """
        if cause in self._selected:
            return self.remove(cause)
        return self.add(cause)

    def __len__(self) -> int:
        return len(self._selected)

    def __contains__(self, cause: object) -> bool:
        return cause in self._selected
