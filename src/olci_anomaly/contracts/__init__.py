"""Pipeline contracts - fail-fast enforcement of product invariants.

Key principle:
- Pydantic validates config correctness
- Contracts validate product correctness
- Algorithms handle per-pixel edge cases (NaN, zero wavelength step)
"""

from olci_anomaly.contracts.failure import (
    ContractViolation,
    MissingInputError,
    TileCancelled,
    TileComputationError,
)
from olci_anomaly.contracts.base import require
from olci_anomaly.contracts.product import (
    validate_input_product,
    collect_missing_inputs,
    assert_tie_point_coverage,
)
from olci_anomaly.contracts.output import assert_output_schema

__all__ = [
    "ContractViolation",
    "MissingInputError",
    "TileCancelled",
    "TileComputationError",
    "require",
    "validate_input_product",
    "collect_missing_inputs",
    "assert_tie_point_coverage",
    "assert_output_schema",
]
