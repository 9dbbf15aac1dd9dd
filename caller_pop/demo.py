"""Fixture data served when a lookup is requested in demo mode."""
from __future__ import annotations

from typing import Any, Dict

from .coercion import HEALTHCARE_PROFILE, coerce
from .models import CallerRecord

DEMO_PHONE = "+17146555375"


def demo_payload() -> Dict[str, Any]:
    """Return a healthcare-style upstream payload."""

    return {
        "pap_id": 302,
        "first_name": "Ryan",
        "last_name": "Dyla Test",
        "provider_name": "Dr. Jhay Booh PSDHF",
        "clinic_name": "One New Clinic Medical - MassAdvantage SCHEMA",
        "program_eligibility": ["CHF", "Obesity", "Diabetes", "Hypertension"],
        "date_of_birth": "1980-08-01",
        "email_address": "jorge+oncm61@brook.ai",
        "home_address": "123 La Cuarta Unit 12A, Morgan Hill, CA 92228",
        "copay_amount": 10.0,
        "insurance": {"primary": "Primary Insurance"},
    }


def demo_record() -> CallerRecord:
    return coerce(demo_payload(), DEMO_PHONE, profile=HEALTHCARE_PROFILE)


__all__ = ["DEMO_PHONE", "demo_payload", "demo_record"]
