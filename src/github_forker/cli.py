"""Console entrypoint.

The workflow itself lives in `github_forker.forker.main`.
"""

from __future__ import annotations

from github_forker.forker.main import main

__all__ = ["main"]


if __name__ == "__main__":
    raise SystemExit(main())
