"""
ResumeAI client - async API client, uploader and state stores for ResumeAI.

This package talks to the ResumeAI backend REST API, performs unsigned
uploads to the Cloudinary asset host and keeps in-memory mirrors of the
notification, feedback and user-profile collections.
"""

__version__ = "1.0.0"
__author__ = "Development Team"
__email__ = "dev@example.com"
