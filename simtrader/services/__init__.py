"""Business logic, one module per feature area."""
