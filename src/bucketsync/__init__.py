"""bucketsync - Synchronize object hierarchies between local disk and S3."""

__version__ = "0.1.0"
