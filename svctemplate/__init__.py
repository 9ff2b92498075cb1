"""Service skeleton: coded errors, JSON routes, HTTP and gRPC servers and a cron job worker."""

__version__ = "0.1.0"