"""sftpmaint - Scheduled archival and purge maintenance for SFTP trees.

Moves aged files from a working folder into a mirrored archive folder
and purges aged files from the archive, one named profile per run.
"""

__version__ = "0.1.0"
