"""Task Manager — authenticated task tracking API.

Users sign up, log in for a short-lived JWT, and manage their own
tasks. Task reads are served from an in-process response cache that
every write invalidates.
"""

__version__ = "0.1.0"
