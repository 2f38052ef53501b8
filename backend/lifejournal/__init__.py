"""lifejournal backend: encrypted storage of journal payloads."""
__version__ = "0.1.0"
