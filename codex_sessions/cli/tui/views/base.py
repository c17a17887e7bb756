"""Base class for browser views."""

from __future__ import annotations


class BaseView:
    """Renders state into plain lines first so views are testable without curses.

    Subclasses that show a scrolling list keep `scroll_offset` in step with
    the selection through `scroll_to`.
    """

    scroll_offset: int = 0

    def get_render_lines(self, width: int, height: int) -> list[str]:
        """Lines this view would draw on a `width` x `height` screen."""
        raise NotImplementedError(f"{self.__class__.__name__} must implement get_render_lines()")

    def scroll_to(self, selected: int, rows: int, total: int) -> int:
        """Adjust `scroll_offset` so row `selected` is inside a `rows`-high window.

        Returns the new offset, never past the last full window.
        """
        if selected < self.scroll_offset:
            self.scroll_offset = selected
        elif selected >= self.scroll_offset + rows:
            self.scroll_offset = selected - rows + 1
        self.scroll_offset = max(0, min(self.scroll_offset, max(0, total - rows)))
        return self.scroll_offset
