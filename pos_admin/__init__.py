"""POS Admin API - point-of-sale back office."""
