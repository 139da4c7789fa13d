"""Cargador de documentos (esquemas y registros).

Este módulo vive en `core/` porque:
- centraliza *de dónde* vienen los documentos (ruta local o URL http/https)
  sin acoplar la CLI a httpx ni a la estructura de los archivos.
- los loaders de `adapters.schema_files` solo reciben texto ya leído.
"""

from __future__ import annotations

import logging
from pathlib import Path

import httpx

from adapters.http_client import build_client
from core.config import AppSettings

logger = logging.getLogger(__name__)


def is_remote(source: str | Path) -> bool:
    return isinstance(source, str) and source.lower().startswith(("http://", "https://"))


def read_text(
    source: str | Path,
    *,
    settings: AppSettings | None = None,
    client: httpx.Client | None = None,
) -> str:
    """Lee el contenido de `source`.

    Reglas:
    - `http://`/`https://` -> GET con el cliente estándar (errores HTTP se propagan).
    - Cualquier otra cosa -> ruta local UTF-8.
    """

    if not is_remote(source):
        path = Path(source)
        logger.debug("reading %s", path)
        return path.read_text(encoding="utf-8")

    url = str(source)
    logger.debug("downloading %s", url)
    if client is not None:
        response = client.get(url)
        response.raise_for_status()
        return response.text

    with build_client(settings) as own_client:
        response = own_client.get(url)
        response.raise_for_status()
        return response.text
