"""Module entrypoint.

Allows:
    python -m logfmt_extract
"""

from __future__ import annotations

from logfmt_extract.server.log_server import main

if __name__ == "__main__":
    main()
