"""Progress reporting for batch uploads."""

from typing import Protocol

from tqdm import tqdm


class ProgressSink(Protocol):
    """Receives one call per finished upload."""

    def advance(self, message: str) -> None: ...


class NullProgress:
    """Discards progress updates."""

    def advance(self, message: str) -> None:
        pass


class TqdmProgress:
    """tqdm bar that prints a line above itself for every finished file."""

    def __init__(self, total: int, desc: str = "Uploading"):
        self.bar = tqdm(total=total, desc=desc, unit="file")

    def advance(self, message: str) -> None:
        self.bar.write(message)
        self.bar.update(1)

    def close(self):
        self.bar.close()
