from typing import List


class MemoryRouter:
    """History stack router. ``replace=True`` swaps the current entry instead of pushing."""

    def __init__(self, location: str = "/"):
        self.history: List[str] = [location]

    @property
    def location(self) -> str:
        return self.history[-1]

    def navigate(self, path: str, replace: bool = False) -> None:
        if replace:
            self.history[-1] = path
        else:
            self.history.append(path)

    def back(self) -> str:
        if len(self.history) > 1:
            self.history.pop()
        return self.location
