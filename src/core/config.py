"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que el pipeline, los loaders y los exportadores lean la misma config.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.errors import NON_FIELD_ERRORS
from core.domain.language import Language


APP_DIR_NAME = "recordguard"


def get_user_config_dir() -> Path:
    """Carpeta de config por usuario: %APPDATA%, Application Support o XDG."""

    if sys.platform.startswith("win"):
        return Path(os.environ.get("APPDATA") or Path.home()) / APP_DIR_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_DIR_NAME
    return Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config") / APP_DIR_NAME


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    """`KEY=valor` por línea; ignora comentarios y líneas sin `=`."""

    parsed: dict[str, str] = {}
    for line in map(str.strip, text.splitlines()):
        if line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if sep and key.strip():
            parsed[key.strip()] = value.strip().strip("\"'")
    return parsed


def write_user_env_vars(values: dict[str, str], *, env_path: Path | None = None) -> Path:
    """Fusiona `values` en el .env de usuario (claves ordenadas) y devuelve la ruta."""

    target = env_path or get_user_env_file()
    target.parent.mkdir(parents=True, exist_ok=True)

    merged = _parse_env_lines(target.read_text(encoding="utf-8")) if target.exists() else {}
    merged.update((key, value) for key, value in values.items() if value is not None)

    body = "".join(f"{key}={merged[key]}\n" for key in sorted(merged))
    target.write_text(f"# {APP_DIR_NAME} user config (.env)\n{body}", encoding="utf-8")
    return target


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/pipeline/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="RECORDGUARD_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    default_language: Language = Field(
        default=Language.ENGLISH,
        description="Idioma de los mensajes built-in (en/es).",
    )
    non_field_errors_key: str = Field(
        default=NON_FIELD_ERRORS,
        min_length=1,
        max_length=64,
        description="Clave bajo la que se agrupan los fallos de registro completo.",
    )
    coerce_decimal_to_string: bool = Field(
        default=True,
        description="Representar decimales como texto al serializar.",
    )
    reject_unknown_fields: bool = Field(
        default=False,
        description="Rechazar claves no declaradas (salvo que el serializer diga lo contrario).",
    )

    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por request al descargar esquemas remotos (segundos).",
    )
    user_agent: str = Field(
        default="recordguard/0.1 (+https://local)",
        min_length=1,
        description="User-Agent para descargas de esquemas.",
    )

    reports_dir: Path = Field(
        default=Path("reports"),
        description="Directorio por defecto para exportaciones JSON/HTML.",
    )
    log_level: str = Field(
        default="WARNING",
        description="Nivel de logging (DEBUG, INFO, WARNING, ERROR).",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    @field_validator("default_language", mode="before")
    @classmethod
    def _coerce_language(cls, value: Any) -> Any:
        # Acepta etiquetas de locale como "es_ES.UTF-8".
        if isinstance(value, str):
            try:
                return Language.coerce(value)
            except ValueError:
                return value
        return value

    def serializer_context(self, **extra: Any) -> dict[str, Any]:
        """Contexto base que el pipeline entrega a los serializers."""

        context: dict[str, Any] = {
            "language": self.default_language,
            "non_field_errors_key": self.non_field_errors_key,
            "coerce_decimal_to_string": self.coerce_decimal_to_string,
            "reject_unknown_fields": self.reject_unknown_fields,
        }
        context.update(extra)
        return context
