"""
Invoice persistence layer.

SQLAlchemy-backed storage, search and collection membership for invoice
aggregates (header, line items, orders).
"""
