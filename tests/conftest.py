"""Root-level pytest fixtures for the anomaly flagging test suite.

Provides shared configuration fixtures following the Pydantic-based
architecture. Tests use these fixtures instead of creating raw dict configs.
"""

import pytest

from olci_anomaly.core.bands import BandSet
from olci_anomaly.schemas import ParamConfig, UserConfig, resolve_config
from tests.helpers.fake_product import make_fake_product


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults."""
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides).

    Use this when tests don't care about specific config values and just
    need a valid InternalConfig to pass to constructors.
    """
    return resolve_config(param_config, None, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Returns a callable that accepts UserConfig-compatible kwargs.

    Examples
    --------
    >>> def test_custom_threshold(make_config):
    ...     config = make_config(SPECTRAL_ANOMALY_THRESHOLD=0.1)
    ...     assert config.flagging.spectral_anomaly_threshold == 0.1
    """
    def _make(**user_overrides):
        if user_overrides:
            return resolve_config(param_config, UserConfig(**user_overrides), None)
        return resolve_config(param_config, None, None)

    return _make


# =============================================================================
# Product Fixtures
# =============================================================================

@pytest.fixture
def band_set():
    """Default 16-band OLCI table."""
    return BandSet()


@pytest.fixture
def fake_product():
    """Flat-spectrum 4x6 product with in-range altitude."""
    return make_fake_product()


@pytest.fixture
def two_band_set():
    """Two bands 5 nm apart, for slopes that can be checked by hand."""
    return BandSet(indices=(1, 2))


@pytest.fixture
def two_band_product(two_band_set):
    return make_fake_product(
        band_set=two_band_set, wavelengths={1: 500.0, 2: 505.0}
    )
