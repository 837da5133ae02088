"""Exception types raised inside the pipeline.

Public entry points catch these and return ``None``; they are visible only to
callers that use the lower-level classes directly.
"""


class RuntimeInitError(RuntimeError):
    """The vision runtime could not be initialized (error or timeout)."""
