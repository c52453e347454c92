"""
ToastTV playback core.

Schedules time-boxed viewing sessions and keeps an external media player
(mpv or VLC) in step with the schedule.
"""

__version__ = "0.4.0"
