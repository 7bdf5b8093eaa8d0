"""
Notion Database → Markdown Sync

Pulls the records of a Notion database into a folder of Markdown
files, one file per record, with the record's properties rendered
as frontmatter.
"""

__version__ = "1.0.0"
