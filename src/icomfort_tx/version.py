#!/usr/bin/env python3
"""iComfort - a Lennox iComfort protocol engine."""

__version__ = "0.4.2"
VERSION = __version__
