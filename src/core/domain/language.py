"""Languages built-in error messages can be rendered in.

Custom messages (serializer hooks, schema `error_messages`) are never
translated; only the catalog in `core.domain.messages` follows the language.
"""

from __future__ import annotations

import re
from enum import Enum

# "es", "es-AR", "es_ES.UTF-8" -> "es"
_TAG_PATTERN = re.compile(r"^([a-z]{2})(?:[-_][a-z0-9]+)*(?:\.[\w-]+)?$")

_NATIVE_NAMES = {"en": "English", "es": "Español"}


class Language(str, Enum):
    ENGLISH = "en"
    SPANISH = "es"

    @classmethod
    def default(cls) -> "Language":
        return cls.ENGLISH

    @classmethod
    def from_bool(cls, spanish: bool) -> "Language":
        """Map the CLI `--es` flag to a language."""

        return cls.SPANISH if spanish else cls.ENGLISH

    @classmethod
    def codes(cls) -> str:
        """Codes joined for prompts, e.g. ``en/es``."""

        return "/".join(member.value for member in cls)

    @classmethod
    def coerce(cls, value: "Language | str | None") -> "Language":
        """Accept a member, its code or a region/locale tag such as ``es-AR``.

        None means the default language. Unknown codes raise ValueError.
        """

        if value is None:
            return cls.default()
        if isinstance(value, Language):
            return value
        text = str(value).strip().lower()
        match = _TAG_PATTERN.match(text)
        return cls(match.group(1) if match else text)

    def label(self) -> str:
        """Name of the language in the language itself."""

        return _NATIVE_NAMES[self.value]
