"""Bookkeeping REST API: users, categories and transactions."""
