"""Unit tests for :mod:`caller_pop.coercion`."""
from __future__ import annotations

import pytest

from caller_pop.coercion import (
    HEALTHCARE_PROFILE,
    STANDARD_PROFILE,
    FieldRule,
    coerce,
    format_address,
)
from caller_pop.models import CallerRecord

SEARCHED = "+17145551212"


def test_empty_payload_returns_defaults() -> None:
    record = coerce({}, SEARCHED)

    assert record == CallerRecord(phone=SEARCHED)
    assert record.name == "Unknown"
    assert record.emails == ()
    assert record.alt_phones == ()
    assert record.risk is None
    assert record.meta == {}
    assert record.as_dict()["altPhones"] == []


@pytest.mark.parametrize("payload", [None, [], "caller", 42, True])
def test_non_object_payloads_coerce_like_empty_object(payload) -> None:
    assert coerce(payload, SEARCHED) == CallerRecord(phone=SEARCHED)


def test_first_and_last_name_are_joined() -> None:
    assert coerce({"first_name": "Jordan", "last_name": "Park"}, SEARCHED).name == "Jordan Park"
    assert coerce({"first_name": "  Jordan ", "last_name": ""}, SEARCHED).name == "Jordan"


def test_blank_name_parts_fall_back_to_unknown() -> None:
    assert coerce({"first_name": "", "last_name": ""}, SEARCHED).name == "Unknown"
    assert coerce({"name": "   ", "first_name": None}, SEARCHED).name == "Unknown"


def test_full_name_alias_takes_priority_over_parts() -> None:
    payload = {"full_name": "Jordan A. Park", "first_name": "Jordan", "last_name": "Park"}

    assert coerce(payload, SEARCHED).name == "Jordan A. Park"


def test_alt_phones_exclude_searched_phone() -> None:
    record = coerce({"phones": ["+17145551212", "+17145550000"]}, SEARCHED)

    assert record.alt_phones == ("+17145550000",)


def test_alt_phones_are_normalised_and_empty_entries_dropped() -> None:
    record = coerce({"phones": ["(714) 555-1212", "", None, "714-555-0000", {"number": "7145559999"}]}, SEARCHED)

    assert record.alt_phones == ("+17145550000", "+17145559999")


def test_list_fields_accept_scalars() -> None:
    record = coerce({"email": "jordan@example.com", "tags": "VIP", "notes": "Prefers email"}, SEARCHED)

    assert record.emails == ("jordan@example.com",)
    assert record.tags == ("VIP",)
    assert record.notes == ("Prefers email",)


def test_list_fields_drop_falsy_elements_and_keep_order() -> None:
    record = coerce({"emails": ["b@example.com", "", None, "a@example.com", "b@example.com"]}, SEARCHED)

    assert record.emails == ("b@example.com", "a@example.com", "b@example.com")


def test_risk_zero_is_kept_and_strings_are_parsed() -> None:
    assert coerce({"risk": 0}, SEARCHED).risk == 0
    assert coerce({"risk_score": "4"}, SEARCHED).risk == 4
    assert coerce({"risk": "2.5"}, SEARCHED).risk == 2.5


@pytest.mark.parametrize("value", [None, "", "high", True, {"level": 3}])
def test_unusable_risk_values_become_none(value) -> None:
    assert coerce({"risk": value}, SEARCHED).risk is None


def test_scalar_attributes_use_first_non_empty_alias() -> None:
    payload = {
        "company": "",
        "company_name": "Acme Corp",
        "job_title": "Buyer",
        "customer_status": "Active",
        "customer_since": "2019-04-02",
    }

    record = coerce(payload, SEARCHED)

    assert record.company == "Acme Corp"
    assert record.title == "Buyer"
    assert record.status == "Active"
    assert record.customer_since == "2019-04-02"


def test_string_address_passes_through_unchanged() -> None:
    address = "123 La Cuarta Unit 12A, Morgan Hill, CA 92228"

    assert coerce({"address": address}, SEARCHED).address == address


def test_structured_address_is_composed_in_order() -> None:
    address = {
        "line1": "1 Main St",
        "line2": "",
        "city": "Irvine",
        "state": "CA",
        "zip": "92618",
        "country": "US",
    }

    assert format_address(address) == "1 Main St • Irvine, CA • 92618 • US"


def test_structured_address_without_state_omits_comma() -> None:
    assert format_address({"street": "1 Main St", "city": "Irvine"}) == "1 Main St • Irvine"
    assert format_address({"state": "CA"}) == "CA"
    assert format_address(["1 Main St"]) == ""


def test_healthcare_payload_maps_provider_fields() -> None:
    payload = {
        "pap_id": 302,
        "first_name": "Ryan",
        "last_name": "Dyla 2",
        "provider_name": "Dr. Jhay Booh PSDHF",
        "clinic_name": "One New Clinic",
        "program_eligibility": ["CHF", "Obesity", "Diabetes", "Hypertension"],
        "date_of_birth": "1980-08-01",
        "email_address": "ryan@example.com",
        "home_address": "123 La Cuarta Unit 12A, Morgan Hill, CA 92228",
        "copay_amount": "10.00",
        "insurance": {"primary": "Primary Insurance"},
    }

    record = coerce(payload, SEARCHED, profile=HEALTHCARE_PROFILE)

    assert record.name == "Ryan Dyla 2"
    assert record.company == "One New Clinic"
    assert record.title == "Dr. Jhay Booh PSDHF"
    assert record.emails == ("ryan@example.com",)
    assert record.tags == ("CHF", "Obesity", "Diabetes", "Hypertension")
    assert record.address == "123 La Cuarta Unit 12A, Morgan Hill, CA 92228"
    assert record.notes == ("PAP ID: 302", "Primary Insurance: Primary Insurance", "DOB: 1980-08-01")
    assert record.meta == {
        "Provider": "Dr. Jhay Booh PSDHF",
        "Clinic": "One New Clinic",
        "PAP ID": 302,
        "Copay": 10.0,
    }


def test_healthcare_copay_absent_leaves_meta_clean() -> None:
    record = coerce({"copay_amount": None, "insurance": "not-a-mapping"}, SEARCHED, profile=HEALTHCARE_PROFILE)

    assert "Copay" not in record.meta
    assert record.notes == ()


def test_profile_extension_adds_meta_and_note_rules() -> None:
    profile = STANDARD_PROFILE.extend(
        aliases={"company": ["org.display"]},
        meta_rules=[FieldRule("Tier", "loyalty.tier")],
        note_rules=[FieldRule("Last order", "orders.last")],
    )
    payload = {"org": {"display": "Acme"}, "loyalty": {"tier": "Gold"}, "orders": {"last": "2024-01-02"}}

    record = coerce(payload, SEARCHED, profile=profile)

    assert record.company == "Acme"
    assert record.meta == {"Tier": "Gold"}
    assert record.notes == ("Last order: 2024-01-02",)
    assert STANDARD_PROFILE.paths("company")[-1] != "org.display"


def test_prepended_aliases_take_priority() -> None:
    profile = STANDARD_PROFILE.extend(aliases={"name": ["preferred_name"]}, prepend=True)

    record = coerce({"name": "Jordan Park", "preferred_name": "JP"}, SEARCHED, profile=profile)

    assert record.name == "JP"


def test_record_meta_is_read_only_and_record_hashable() -> None:
    record = coerce({"customer_id": "C-1"}, SEARCHED)

    with pytest.raises(TypeError):
        record.meta["Injected"] = "x"  # type: ignore[index]

    assert record.meta == {"Customer ID": "C-1"}
    assert hash(record) == hash(coerce({"customer_id": "C-1"}, SEARCHED))
    assert record.as_dict()["meta"] == {"Customer ID": "C-1"}
