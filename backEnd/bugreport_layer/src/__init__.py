"""
Bugreport Layer source modules.

Pipeline:
    ingest.py           - Main orchestrator
    extract_archive.py  - Archive -> classified artifacts (recursive)
    classify.py         - Entry name -> artifact kind
    split_file.py       - Large artifact -> byte-contiguous segments
    manifest.py         - Project manifest persistence
    search.py           - Line search over artifacts and segments
    keywords.py         - Keyword categories for composite searches
    preferences.py      - User preferences
    recent_projects.py  - Most recently opened projects
"""
