"""Console script entrypoint; the CLI itself lives in `github_label_sync.main`."""

from __future__ import annotations

from github_label_sync.main import main

__all__ = ["main"]


if __name__ == "__main__":
    raise SystemExit(main())
