"""Catálogo de mensajes built-in.

Los mensajes se escriben en inglés en fields/validators y se traducen aquí
(estilo gettext: la clave es el propio texto en inglés). Los mensajes
personalizados del usuario nunca pasan por el catálogo.
"""

from __future__ import annotations

from core.domain.language import Language

_SPANISH: dict[str, str] = {
    "Invalid input.": "Entrada no válida.",
    "This field is required.": "Este campo es obligatorio.",
    "This field may not be null.": "Este campo no puede ser nulo.",
    "This field may not be blank.": "Este campo no puede estar en blanco.",
    "Not a valid string.": "No es una cadena válida.",
    "A valid integer is required.": "Se requiere un número entero válido.",
    "A valid number is required.": "Se requiere un número válido.",
    "String value too large.": "El valor de texto es demasiado largo.",
    "Must be a valid boolean.": "Debe ser un booleano válido.",
    "Enter a valid email address.": "Introduce una dirección de correo válida.",
    "This value does not match the required pattern.": "Este valor no cumple el patrón requerido.",
    '"{input}" is not a valid choice.': '"{input}" no es una opción válida.',
    "Datetime has wrong format. Use ISO 8601.": "La fecha/hora tiene un formato incorrecto. Usa ISO 8601.",
    'Expected a list of items but got type "{input_type}".': 'Se esperaba una lista de elementos pero se recibió "{input_type}".',
    "This list may not be empty.": "Esta lista no puede estar vacía.",
    "Ensure this field has at least {min_length} elements.": "Asegúrate de que este campo tenga al menos {min_length} elementos.",
    "Ensure this field has no more than {max_length} elements.": "Asegúrate de que este campo no tenga más de {max_length} elementos.",
    'Invalid data. Expected a dictionary, but got {datatype}.': "Datos no válidos. Se esperaba un diccionario, pero se recibió {datatype}.",
    "Unexpected field.": "Campo inesperado.",
    "Ensure there are no more than {max_digits} digits in total.": "Asegúrate de que no haya más de {max_digits} dígitos en total.",
    "Ensure there are no more than {max_decimal_places} decimal places.": "Asegúrate de que no haya más de {max_decimal_places} decimales.",
    "Ensure there are no more than {max_whole_digits} digits before the decimal point.": "Asegúrate de que no haya más de {max_whole_digits} dígitos antes del punto decimal.",
    "Ensure this value is greater than or equal to {limit_value}.": "Asegúrate de que este valor sea mayor o igual que {limit_value}.",
    "Ensure this value is less than or equal to {limit_value}.": "Asegúrate de que este valor sea menor o igual que {limit_value}.",
    "Ensure this value is greater than {limit_value}.": "Asegúrate de que este valor sea mayor que {limit_value}.",
    "Ensure this value is less than {limit_value}.": "Asegúrate de que este valor sea menor que {limit_value}.",
    "Ensure this field has at least {limit_value} characters.": "Asegúrate de que este campo tenga al menos {limit_value} caracteres.",
    "Ensure this field has no more than {limit_value} characters.": "Asegúrate de que este campo no tenga más de {limit_value} caracteres.",
    "This value is not allowed.": "Este valor no está permitido.",
    "The fields {field_names} must be provided together.": "Los campos {field_names} deben indicarse juntos.",
    "Only one of the fields {field_names} may be provided.": "Solo uno de los campos {field_names} puede indicarse.",
    "The fields {field_names} must make a unique set.": "Los campos {field_names} deben formar un conjunto único.",
    "{left} must be {op_label} {right}.": "{left} debe ser {op_label} {right}.",
}

_CATALOGS: dict[Language, dict[str, str]] = {
    Language.SPANISH: _SPANISH,
}


def translate(message: str, language: Language | str | None = None) -> str:
    """Devuelve `message` en `language` (o el original si no hay entrada)."""

    catalog = _CATALOGS.get(Language.coerce(language))
    if not catalog:
        return message
    return catalog.get(message, message)
