"""Storage module for hero persistence.

Provides:
- JSON session files (hero, initial snapshot, transaction log)
- Import of Helden-Software XML exports
"""

from dsa_tracker.storage.helden import load_helden_xml, parse_helden_xml
from dsa_tracker.storage.session_store import (
    SESSION_FORMAT_VERSION,
    HeroStore,
    SessionFile,
)

__all__ = [
    "HeroStore",
    "SessionFile",
    "SESSION_FORMAT_VERSION",
    "load_helden_xml",
    "parse_helden_xml",
]
