"""
Persistence - the state store and the in-memory entity storage.
"""
