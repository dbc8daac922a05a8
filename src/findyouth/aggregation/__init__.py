"""Aggregation module for event listings and organization pages.

- Resolves organization display data with graceful degradation
- Computes aggregate ratings (one precision policy)
- Assembles event view models
- Forbidden: writes of any kind
"""
