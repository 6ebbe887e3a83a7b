#!/usr/bin/env python3
"""
Entry point for running shindancore from a source checkout.

Equivalent to the installed ``shindan`` command.
"""

from __future__ import annotations

from shindancore.cli import main

if __name__ == "__main__":
    main()
