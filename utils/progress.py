"""
Console progress reporting for long per-row passes.
"""

import sys


def row_percent(y, height):
    """Percentage reported before processing logical row y (0 for the first row, 100 for the last)."""
    if height <= 1:
        return 100
    return 100 * y // (height - 1)


class ConsoleProgress:
    """
    Single-line percentage indicator, overwritten in place.

    Use as a context manager so the line is terminated with a newline once the
    pass is over:

        with ConsoleProgress() as progress:
            draw_field(buffer, field, progress)
    """

    def __init__(self, stream=None):
        self.stream = stream if stream is not None else sys.stdout
        self.last_percent = None

    def __call__(self, percent: int):
        self.last_percent = percent
        self.stream.write(f"\r{percent}%")
        self.stream.flush()

    def close(self):
        self.stream.write("\n")
        self.stream.flush()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
