"""
Barangay Registry - indexed household, resident and user records on Redis.

Stores records as Redis hashes, keeps hand-maintained secondary indexes in
step with every write, refuses to orphan residents, and aggregates
demographic and socioeconomic statistics.
"""

__version__ = "0.1.0"
__author__ = "Barangay Registry Contributors"
