"""Async data access for rules, the processed-event ledger and audit logs."""
