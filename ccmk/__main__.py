"""Entry point for ``python -m ccmk``."""

from __future__ import annotations

from ccmk.cli.main import main

if __name__ == "__main__":
    main()
