"""Services package - pricing and availability evaluators."""
