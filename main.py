#!/usr/bin/env python3
"""Conflux - resolve git merge conflicts one at a time."""

from conflux.cli import main

if __name__ == "__main__":
    main()
