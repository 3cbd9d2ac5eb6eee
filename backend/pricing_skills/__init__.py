"""
Pricing skills: deterministic engines used by the enhanced pricing pipeline.

Each skill is self-contained (definition.py + impl.py) and importable
without the application layer.
"""
