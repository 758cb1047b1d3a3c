"""Domain layer: record model, outcomes, ports and the reconciliation core."""
