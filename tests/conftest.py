"""Pytest configuration for repository-relative imports."""

import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from ductile.schema import Dataset  # noqa: E402

# Linear up to index 2 (E = 200000 MPa between points 1 and 2), then
# hardening. The 0.2 % offset line crosses the segment between points 3 and 4.
ELASTIC_PLASTIC = [
    {"strain": 0.0, "stress": 0.0},
    {"strain": 0.001, "stress": 200.0},
    {"strain": 0.002, "stress": 400.0},
    {"strain": 0.004, "stress": 500.0},
    {"strain": 0.006, "stress": 550.0},
]


@pytest.fixture
def elastic_plastic():
    return Dataset.from_records(ELASTIC_PLASTIC)


@pytest.fixture
def elastic_plastic_csv():
    rows = "\n".join(f"{r['strain']},{r['stress']}" for r in ELASTIC_PLASTIC)
    return "strain,stress\n" + rows + "\n"
