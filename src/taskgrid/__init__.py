"""Client-side task/calendar state synchronizer: overlap layout + API reconciliation."""

__version__ = "0.1.0"
