"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en `validate`, `demo` e `inspect`.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from adapters.schema_files.models import FieldSpec, SchemaFile
from core.domain.models import BatchReport


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida.

    Se omite en modo `--quiet` para no ensuciar pipelines.
    """

    title = Text("recordguard", style="bold cyan")
    subtitle = Text("Field checks • Record checks • Aggregated errors", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_errors_table(report: BatchReport) -> Table:
    """Una fila por motivo de fallo, agrupadas por registro."""

    table = Table(title=f"Rejected records ({report.schema_name})")
    table.add_column("#", style="cyan", no_wrap=True, justify="right")
    table.add_column("Field", style="magenta")
    table.add_column("Reason", style="red")
    for outcome in report.outcomes:
        if outcome.valid:
            continue
        for path, message in outcome.error_rows():
            table.add_row(str(outcome.index), path, message)
    return table


def build_summary_panel(report: BatchReport) -> Panel:
    """Panel con totales del lote."""

    ok = report.all_valid
    body = Text()
    body.append(f"Records: {report.total}\n")
    body.append(f"Valid:   {report.valid_count}\n", style="green")
    body.append(f"Invalid: {report.invalid_count}", style="red" if report.invalid_count else "green")
    fields = report.failing_fields()
    if fields:
        body.append("\n\nMost failing fields:\n", style="bold")
        for name, count in list(fields.items())[:5]:
            body.append(f"- {name}: {count}\n")
    body.append(f"\nLanguage: {report.language.label()}", style="dim")
    return Panel(
        body,
        title=Text(report.schema_name, style="bold"),
        border_style="green" if ok else "red",
    )


def _field_constraints(spec: FieldSpec) -> str:
    parts: list[str] = []
    for attr in ("min_value", "max_value", "gt", "lt", "min_length", "max_length", "max_digits", "decimal_places"):
        value = getattr(spec, attr)
        if value is not None:
            parts.append(f"{attr}={value}")
    if spec.pattern:
        parts.append(f"pattern={spec.pattern}")
    if spec.choices:
        parts.append("choices=" + "|".join(str(c) for c in spec.choices))
    if spec.not_in:
        parts.append("not_in=" + "|".join(str(c) for c in spec.not_in))
    if spec.normalize:
        parts.append("normalize=" + ",".join(spec.normalize))
    return " ".join(parts)


def build_schema_table(schema: SchemaFile) -> Table:
    table = Table(title=f"Schema: {schema.name}")
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Type", style="white")
    table.add_column("Required", style="green")
    table.add_column("Constraints", style="dim")

    def add(specs: list[FieldSpec], prefix: str = "") -> None:
        for spec in specs:
            required = spec.required if spec.required is not None else not (spec.has_default or spec.read_only)
            kind = f"{spec.type}[]" if spec.many else spec.type
            table.add_row(prefix + spec.name, kind, "yes" if required else "no", _field_constraints(spec))
            if spec.fields:
                add(spec.fields, prefix=f"{prefix}{spec.name}.")

    add(schema.fields)
    return table


def build_rules_table(schema: SchemaFile) -> Table:
    table = Table(title="Record rules")
    table.add_column("Kind", style="cyan")
    table.add_column("Fields", style="white")
    table.add_column("Message", style="dim")
    for rule in schema.rules:
        if rule.kind == "compare":
            target = rule.right if rule.right is not None else repr(rule.value)
            fields = f"{rule.left} {rule.op} {target}"
        else:
            fields = ", ".join(rule.fields)
        table.add_row(rule.kind, fields, rule.message or "")
    return table
