"""
Booru Copier – copy images from one Philomena-style booru to another.

Supports:
  • Any search query the source booru understands
  • Philomena JSON API boards and Twibooru's search dialect
  • Description links rewritten to point back at the source
  • Exponential backoff on failed searches and uploads
  • Re-runs, relying on the target's duplicate detection
"""

__version__ = "1.2.0"
