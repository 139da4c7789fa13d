"""Atajo para ejecutar la CLI desde un checkout: `python main.py validate ...`.

Sin `pip install -e .` los paquetes de `src/` no están en el path; este
script lo añade antes de importar la app de Typer.
"""

from __future__ import annotations

import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parent / "src"


def main() -> None:
    if str(SRC_DIR) not in sys.path:
        sys.path.insert(0, str(SRC_DIR))

    from cli.main import run  # noqa: PLC0415

    run()


if __name__ == "__main__":
    main()
