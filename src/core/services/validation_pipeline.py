"""Batch validation utilities.

This module runs one serializer class over many records, one record at a
time, and gathers the outcomes into a `BatchReport`. The CLI delegates all
aggregation to these helpers, which keeps side-effects (printing, progress
bars) out of the core logic and makes the pipeline reusable for other
entry-points (APIs, batch jobs, tests).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Sequence

from core.config import AppSettings
from core.domain.errors import ValidationError
from core.domain.models import BatchReport, RecordOutcome
from core.serializers import Serializer

logger = logging.getLogger(__name__)


@dataclass
class ValidationRequest:
    """Parameters that control a batch run."""

    records: Sequence[Any]
    partial: bool = False
    context: dict[str, Any] = field(default_factory=dict)
    schema_name: str | None = None


@dataclass
class PipelineHooks:
    """Optional callbacks for UI layers (progress, warnings)."""

    warning: Callable[[str], None] | None = None
    start: Callable[[int], None] | None = None
    record_done: Callable[[int, int, bool], None] | None = None


def _codes_from(errors: Mapping[str, Any]) -> dict[str, Any]:
    return ValidationError(dict(errors)).get_codes()


def validate_record(
    serializer_class: type[Serializer],
    record: Any,
    *,
    index: int = 0,
    partial: bool = False,
    context: Mapping[str, Any] | None = None,
) -> RecordOutcome:
    """Validate a single record and describe the result."""

    serializer = serializer_class(data=record, partial=partial, context=dict(context or {}))
    if serializer.is_valid():
        return RecordOutcome(index=index, valid=True, data=serializer.data)

    errors = dict(serializer.errors)
    return RecordOutcome(index=index, valid=False, errors=errors, codes=_codes_from(errors))


def validate_records(
    *,
    serializer_class: type[Serializer],
    settings: AppSettings,
    request: ValidationRequest,
    hooks: PipelineHooks | None = None,
) -> BatchReport:
    """Validate every record independently; a failing record never stops the run."""

    hooks = hooks or PipelineHooks()
    context = settings.serializer_context(**request.context)
    schema_name = request.schema_name or serializer_class.__name__
    total = len(request.records)

    if total == 0 and hooks.warning:
        hooks.warning("No records to validate.")
    if hooks.start:
        hooks.start(total)

    outcomes: list[RecordOutcome] = []
    for index, record in enumerate(request.records):
        outcome = validate_record(
            serializer_class,
            record,
            index=index,
            partial=request.partial,
            context=context,
        )
        if outcome.valid:
            logger.debug("record %d accepted by %s", index, schema_name)
        else:
            logger.info("record %d rejected by %s: %s", index, schema_name, sorted(outcome.errors))
        outcomes.append(outcome)
        if hooks.record_done:
            hooks.record_done(index + 1, total, outcome.valid)

    report = BatchReport(
        schema_name=schema_name,
        outcomes=outcomes,
        language=context["language"],
    )
    logger.info(
        "%s: %d/%d records valid", schema_name, report.valid_count, report.total
    )
    return report
