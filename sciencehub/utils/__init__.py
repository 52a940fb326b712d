"""Shared utilities: errors, logging, retries and dependencies."""
