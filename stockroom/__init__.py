"""Stockroom: shared inventories with optimistic concurrency."""
