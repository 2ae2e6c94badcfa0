"""Allow running as `python -m chat_search`."""

from __future__ import annotations

import sys

from chat_search.cli import main

if __name__ == "__main__":
    sys.exit(main())
