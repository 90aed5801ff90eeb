"""
Hooks - the registry, the injected context and the module's callbacks.
"""
