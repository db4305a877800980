"""Allow ``python -m video_clock`` to launch the clock."""

from __future__ import annotations

import sys


def main() -> None:
    from video_clock import run
    sys.exit(run(sys.argv[1:]))


if __name__ == "__main__":
    main()
