"""
Available offline files synchronization

Schedules the periodic job keeping an account's available offline files in
sync and maintains the synchronization checkpoint in the local database.
"""

__version__ = "0.1.0"
