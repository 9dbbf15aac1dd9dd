"""Export utilities for batch lookup outcomes."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, MutableMapping, Optional, Sequence, Union

import pandas as pd

from .models import BatchResult

PathLike = Union[str, Path]

_BASE_COLUMNS = [
    "request_id",
    "input_phone",
    "searched_phone",
    "outcome",
    "message",
    "record_count",
    "name",
    "company",
    "title",
    "emails",
    "alt_phones",
    "address",
    "tags",
    "risk",
    "status",
    "customer_since",
    "notes",
]


def export_outcomes(
    results: Sequence[BatchResult],
    path: PathLike,
    *,
    include_metadata: bool = True,
    sheet_name: str = "Callers",
    exporter_kwargs: Optional[MutableMapping[str, object]] = None,
) -> Path:
    """Write batch lookup outcomes to a CSV or Excel file."""

    dataframe = outcomes_to_dataframe(results, include_metadata=include_metadata)
    output_path = Path(path)
    _write_dataframe(dataframe, output_path, sheet_name=sheet_name, exporter_kwargs=exporter_kwargs)
    return output_path


def outcomes_to_dataframe(results: Sequence[BatchResult], *, include_metadata: bool = True) -> pd.DataFrame:
    """Convert batch results into a :class:`pandas.DataFrame`, one row per request."""

    rows = [_result_to_row(result, include_metadata=include_metadata) for result in results]
    if not rows:
        return pd.DataFrame(columns=_BASE_COLUMNS)
    return pd.DataFrame(rows)


def _result_to_row(result: BatchResult, *, include_metadata: bool) -> MutableMapping[str, object]:
    outcome = result.outcome
    record = outcome.record
    row: MutableMapping[str, object] = {
        "request_id": result.request.request_id,
        "input_phone": result.request.phone,
        "searched_phone": outcome.searched_phone,
        "outcome": outcome.kind.value,
        "message": outcome.message,
        "record_count": len(outcome.records),
        "name": record.name if record else None,
        "company": record.company if record else None,
        "title": record.title if record else None,
        "emails": _join_list(record.emails) if record else None,
        "alt_phones": _join_list(record.alt_phones) if record else None,
        "address": record.address if record else None,
        "tags": _join_list(record.tags) if record else None,
        "risk": record.risk if record else None,
        "status": record.status if record else None,
        "customer_since": record.customer_since if record else None,
        "notes": _join_list(record.notes) if record else None,
    }

    if record:
        for key, value in record.meta.items():
            row[f"meta.{key}"] = value

    if include_metadata:
        for key, value in result.request.metadata.items():
            row[f"input.{key}"] = value

    return row


def _join_list(values: Iterable[Optional[str]]) -> str:
    return "; ".join(str(value).strip() for value in values if value and str(value).strip())


def _write_dataframe(
    dataframe: pd.DataFrame,
    path: Path,
    *,
    sheet_name: str,
    exporter_kwargs: Optional[MutableMapping[str, object]],
) -> None:
    exporter_kwargs = dict(exporter_kwargs or {})
    suffix = path.suffix.lower()

    if suffix in {".csv", ".tsv"}:
        if suffix == ".tsv":
            exporter_kwargs.setdefault("sep", "\t")
        dataframe.to_csv(path, index=False, **exporter_kwargs)
        return

    if suffix in {".xls", ".xlsx", ".xlsm", ".xlsb"}:
        engine = exporter_kwargs.pop("engine", None) or "openpyxl"
        dataframe.to_excel(path, index=False, sheet_name=sheet_name, engine=engine, **exporter_kwargs)
        return

    raise ValueError(f"Unsupported export file extension: {suffix}")


__all__ = ["export_outcomes", "outcomes_to_dataframe"]
