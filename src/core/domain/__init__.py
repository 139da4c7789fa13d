"""Modelos y entidades del dominio.

Por qué:
- Aquí viven los errores de validación, el catálogo de mensajes y los modelos
  de resultados (Pydantic v2).
- El dominio no conoce archivos, HTTP ni CLI: solo conceptos del problema.
"""
