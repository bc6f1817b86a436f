"""Shared helpers used across lunch_api features."""
