"""Unit tests for individual ledger components"""
