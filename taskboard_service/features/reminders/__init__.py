"""Reminder engine: ledger, notification bell and per-user view sessions."""
