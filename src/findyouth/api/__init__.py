"""API module for FindYouth.

api layer:
- Validates inputs, reads/writes DB through repo and forms
- Returns view models for the presentation layer
- Auth context is an explicit dependency, never a global
"""
