"""Module entrypoint for ``python -m drctl``."""

from __future__ import annotations

from drctl.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
