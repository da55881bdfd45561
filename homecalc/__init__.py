"""Home-purchase recalculation engine.

One input snapshot goes in, every derived mortgage, tax, affordability and
wealth figure comes out.  This module also exposes the package version for
runtime display."""

from .version import __version__

__all__ = ["__version__"]
