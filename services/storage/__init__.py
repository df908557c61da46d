"""Persistence: JSON document store and the settings repository.

- documents.py: file-backed collections with merge/update semantics
- settings_repo.py: global settings doc, ConfigProvider for the cache
"""
