"""Presentation layer: line-oriented console"""
