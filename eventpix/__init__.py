"""
Backend package for event-scoped photo sharing.

Clients create a short-lived event, upload photos to it and read them back
newest first. Metadata lives in a table store and photo bytes in an object
store; both are pluggable so the same service runs against Azure, a SQL
database plus S3, or in-memory backends for development.
"""
