"""
parkledger - in-memory parking ledger

Tracks vehicles entering and leaving named parking facilities, prices each
stay with a quarter-hour tariff and aggregates revenue per facility and day.
"""

__version__ = "1.0.0"
