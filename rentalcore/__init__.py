"""rentalcore - pricing, availability and rental rule engine for equipment rental stores."""

__version__ = "0.1.0"
