"""Shared fixtures for SolarWise engine, service and API tests."""

from __future__ import annotations

import pytest
from sqlalchemy.dialects.postgresql import JSONB, UUID as PG_UUID
from sqlalchemy.ext.compiler import compiles

# ---------------------------------------------------------------------------
# SQLite compatibility for PostgreSQL column types
# ---------------------------------------------------------------------------

@compiles(PG_UUID, "sqlite")
def _compile_uuid_sqlite(type_, compiler, **kw):
    return "CHAR(36)"


@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_, compiler, **kw):
    return "JSON"


# ======================================================================
# Appliance fixtures
# ======================================================================

@pytest.fixture
def fridge_item() -> dict:
    """150 W fridge running around the clock: 3.60 kWh/day."""
    return {
        "nameOfItem": "Fridge",
        "quantity": 1,
        "wattage": 150,
        "dayHours": 12,
        "nightHours": 12,
    }


@pytest.fixture
def household_items() -> list[dict]:
    """3000 W across two units, 6 summed hours: 18.00 kWh/day."""
    return [
        {
            "nameOfItem": "Air Conditioner",
            "quantity": 2,
            "wattage": 1200,
            "dayHours": 2,
            "nightHours": 1,
        },
        {
            "nameOfItem": "Water Pump",
            "quantity": 1,
            "wattage": 600,
            "dayHours": 2,
            "nightHours": 1,
        },
    ]

