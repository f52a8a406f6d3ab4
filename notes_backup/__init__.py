"""
Notes Backup
============

Configuration-driven backup runner. Each run archives the configured source
folders into dated zip files, writes a log file per job and emails a single
status report:
- Run configuration loading and validation
- Sequential backup job execution with per-job failure isolation
- Zip archiving of source folder contents
- Summary report building
- SMTP notification with stored credentials
"""

__version__ = "1.0.0"
__author__ = "Notes Backup Team"
