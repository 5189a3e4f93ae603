"""Sample data builders for demos and manual testing."""

from .sample_data import SampleAgency

__all__ = ["SampleAgency"]
