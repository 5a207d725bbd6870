"""Command-line interface for the IOU ledger."""
