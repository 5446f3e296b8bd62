"""
Background work that runs alongside the client.

Workers:
- BackgroundJobService: queues jobs and reports their progress
"""

from .jobs import BackgroundJobService, new_job_id

__all__ = ['BackgroundJobService', 'new_job_id']
