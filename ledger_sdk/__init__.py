"""Shared helpers for the reconciliation and posting services."""
