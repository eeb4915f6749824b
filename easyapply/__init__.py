"""LinkedIn Easy Apply automation: listing collection and the apply-modal state machine."""

__version__ = "0.1.0"
