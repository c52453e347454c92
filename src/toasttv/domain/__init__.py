"""
Domain layer - media items and player status value objects.

This layer contains the core value types and the collaborator protocols,
independent of any socket, file or clock concerns.
"""
