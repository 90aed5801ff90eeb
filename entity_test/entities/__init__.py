"""
Entities - type definitions, fields, entities and their host manager.
"""
