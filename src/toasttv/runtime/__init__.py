"""
Runtime layer - scheduling, session accounting and the playback loop.
"""
