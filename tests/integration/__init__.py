"""Integration tests running whole command sequences"""
