"""HTTP API over the proposal voting ledger."""
