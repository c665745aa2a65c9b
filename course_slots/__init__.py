"""Course slot materialization and capacity ledger service."""
