"""pairbench: compare two implementations side by side.

Runs named benchmark specs against a "left" and a "right" subject,
decides whether the measured difference is significant and prints a
comparison table.
"""

__version__ = "0.1.0"

from pairbench.runner import Report, Runner, create_runner  # noqa: E402

__all__ = ["Report", "Runner", "create_runner", "__version__"]
