import pandas as pd

from caller_pop.errors import UpstreamFailure
from caller_pop.ingestion.exporters import export_outcomes, outcomes_to_dataframe
from caller_pop.ingestion.models import BatchResult, LookupRequest
from caller_pop.models import CallerRecord, LookupOutcome, OutcomeKind


def _build_sample_results() -> list:
    found = BatchResult(
        request=LookupRequest(phone="714-555-1212", request_id="1", metadata={"Queue": "billing"}),
        outcome=LookupOutcome(
            kind=OutcomeKind.FOUND,
            searched_phone="+17145551212",
            raw_phone="714-555-1212",
            records=(
                CallerRecord(
                    phone="+17145551212",
                    name="Ada Lovelace",
                    company="Analytical Engines",
                    emails=("ada@example.com", "ada+alt@example.com"),
                    alt_phones=("+17145550000",),
                    tags=("VIP",),
                    risk=2,
                    meta={"Copay": 10.0},
                ),
            ),
        ),
    )
    failed = BatchResult(
        request=LookupRequest(phone="7145559999", request_id="2"),
        outcome=LookupOutcome(
            kind=OutcomeKind.UPSTREAM_FAILURE,
            searched_phone="+17145559999",
            message="Upstream 502 Bad Gateway: oops",
            error=UpstreamFailure("Upstream 502 Bad Gateway: oops", status_code=502),
        ),
    )
    return [found, failed]


def test_outcomes_to_dataframe_flattens_records():
    dataframe = outcomes_to_dataframe(_build_sample_results())

    required_columns = {"request_id", "outcome", "name", "emails", "alt_phones", "meta.Copay", "input.Queue"}
    assert required_columns.issubset(dataframe.columns)
    first, second = dataframe.iloc[0], dataframe.iloc[1]
    assert first["emails"] == "ada@example.com; ada+alt@example.com"
    assert first["record_count"] == 1
    assert second["outcome"] == "upstream_failure"
    assert second["record_count"] == 0
    assert pd.isna(second["name"])


def test_outcomes_to_dataframe_without_results_keeps_columns():
    dataframe = outcomes_to_dataframe([])

    assert dataframe.empty
    assert "outcome" in dataframe.columns


def test_export_outcomes_to_csv_and_excel(tmp_path):
    results = _build_sample_results()

    csv_path = tmp_path / "outcomes.csv"
    excel_path = tmp_path / "outcomes.xlsx"

    export_outcomes(results, csv_path)
    export_outcomes(results, excel_path)

    csv_frame = pd.read_csv(csv_path)
    excel_frame = pd.read_excel(excel_path)

    assert csv_frame.loc[0, "name"] == "Ada Lovelace"
    assert csv_frame.loc[1, "message"] == "Upstream 502 Bad Gateway: oops"
    assert excel_frame.loc[0, "alt_phones"] == "+17145550000"
