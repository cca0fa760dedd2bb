"""Host-runtime adapters: native value conversion and call evaluation."""

__all__ = [
    "native",
    "python_host",
]
