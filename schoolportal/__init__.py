"""
School Portal — Public school website with an admin dashboard.

Content lives in one document that is cached locally and mirrored to a
cloud endpoint.
"""

__version__ = "1.0.0"
