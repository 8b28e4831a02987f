"""suite-harness — packages test-suite host launchers with suite metadata."""

__version__ = "0.1.0"
