"""Keyboard/pointer selection state for the suggestion dropdown.

The open/closed part is a python-statemachine ``StateMachine``; the
highlighted row and the committed product are plain attributes kept
alongside it by ``ResultSelection``.
"""

from __future__ import annotations

from typing import Sequence

from statemachine import State, StateMachine

from typeahead.models import Product, SelectionState


class DropdownSM(StateMachine):
    """Two-state dropdown visibility.

    States:
        closed -- suggestions hidden (initial; a committed product may be shown).
        open   -- suggestions visible, arrow keys move the highlight.

    Both events are accepted from either state so callers never need to
    check before sending.
    """

    closed = State("closed", initial=True, value="closed")
    open = State("open", value="open")

    show = closed.to(open) | open.to.itself()
    hide = open.to(closed) | closed.to.itself()


class ResultSelection:
    """Highlighted index, dropdown state and committed product.

    ``highlighted_index`` is always -1 or a valid index into the result
    sequence last passed in; callers clamp with ``clamp()`` whenever the
    sequence shrinks.
    """

    def __init__(self) -> None:
        self._dropdown = DropdownSM()
        self.highlighted_index: int = -1
        self.committed: Product | None = None

    @property
    def is_open(self) -> bool:
        return self._dropdown.current_state.value == "open"

    def snapshot(self) -> SelectionState:
        return SelectionState(
            highlighted_index=self.highlighted_index,
            is_open=self.is_open,
            committed=self.committed,
        )

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def edit(self) -> None:
        """User typed: forget highlight and commitment, open the dropdown."""
        self.highlighted_index = -1
        self.committed = None
        self._dropdown.show()

    def move_down(self, result_count: int) -> bool:
        """Arrow-down. Returns True if the highlight moved."""
        if not self.is_open or result_count == 0:
            return False
        target = min(self.highlighted_index + 1, result_count - 1)
        moved = target != self.highlighted_index
        self.highlighted_index = target
        return moved

    def move_up(self) -> bool:
        """Arrow-up. Returns True if the highlight moved."""
        if not self.is_open:
            return False
        target = max(self.highlighted_index - 1, -1)
        moved = target != self.highlighted_index
        self.highlighted_index = target
        return moved

    def commit_highlighted(self, results: Sequence[Product]) -> Product | None:
        """Enter. Commits the highlighted product, or does nothing without one."""
        if not self.is_open or not 0 <= self.highlighted_index < len(results):
            return None
        return self._commit(results[self.highlighted_index])

    def click(self, index: int, results: Sequence[Product]) -> Product | None:
        """Pointer click on row *index*: highlight it, then commit."""
        if not 0 <= index < len(results):
            return None
        self.highlighted_index = index
        return self._commit(results[index])

    def dismiss(self) -> None:
        """Escape: close and clear the highlight, keep the committed product."""
        self._dropdown.hide()
        self.highlighted_index = -1

    def blur(self) -> None:
        """Focus left the input: close, keep highlight and committed product."""
        self._dropdown.hide()

    # ------------------------------------------------------------------
    # ResultSet bookkeeping
    # ------------------------------------------------------------------

    def reset_highlight(self) -> None:
        self.highlighted_index = -1

    def clamp(self, result_count: int) -> None:
        if self.highlighted_index >= result_count:
            self.highlighted_index = result_count - 1

    def _commit(self, product: Product) -> Product:
        self.committed = product
        self._dropdown.hide()
        return product
