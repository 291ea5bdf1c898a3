"""Shared utilities for taskmaster core modules."""
