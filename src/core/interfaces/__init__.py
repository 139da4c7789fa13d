"""Interfaces/abstracciones del Core.

Por qué:
- Define contratos (Protocol) para validadores reutilizables.
- Cualquier callable que cumpla el contrato se puede enchufar en un campo o
  en un serializer sin heredar de nada.
"""
