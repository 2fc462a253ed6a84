"""Bulk provisioning of git branches from a common base revision."""
