"""
FPA Kernel

Shared foundation for the Function Point estimation engines:
- Typed exception hierarchy with machine-readable codes
- Structured JSON logging with request-scoped context
- Immutable domain value objects (components, GSC vector, configuration)
"""

__version__ = "0.1.0"
