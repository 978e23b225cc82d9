"""
Bugreport Layer

Ingestion pipeline that turns bugreport bundles (zip archives, possibly
nested) into searchable project directories.

Artifacts:
- bugreport: text dumps, split into segments when larger than 10 MiB
- video: screen recordings, extracted as-is
"""

__version__ = "0.1.0"
