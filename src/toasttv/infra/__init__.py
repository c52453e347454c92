"""
Infrastructure layer - logging, settings, and technical concerns.

This layer holds process-level settings, logging configuration and the
exception hierarchy shared by the runtime and the player clients.
"""
