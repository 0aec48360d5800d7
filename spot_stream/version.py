# Version string (if updated, update also the GitHub release tag "v<version>")
__version__ = "0.1.0"
