# Path: core/__init__.py
# Purpose: Package initializer for core application layer.
# Layer: core.
# Details: Aggregates subpackages for storage, clips, hashing, search, capture, uploads, and models.
