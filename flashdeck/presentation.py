"""
Transient, per-session presentation state: answer visibility and theme.
"""


class CardPresentationState:
    """Whether the answer side of the displayed card is showing."""

    def __init__(self) -> None:
        self._revealed = False

    @property
    def revealed(self) -> bool:
        return self._revealed

    def reveal(self) -> None:
        self._revealed = True

    def hide(self) -> None:
        self._revealed = False


class ThemeState:
    """Light/dark toggle. Pure presentation, never persisted."""

    def __init__(self, dark_mode: bool = False) -> None:
        self.dark_mode = dark_mode

    def toggle(self) -> bool:
        self.dark_mode = not self.dark_mode
        return self.dark_mode
