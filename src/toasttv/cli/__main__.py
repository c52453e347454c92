#!/usr/bin/env python3
"""
CLI entry point for toasttv.cli module.

This allows running: python -m toasttv.cli
"""

from .main import app

if __name__ == "__main__":
    app()
