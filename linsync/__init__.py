"""
linsync - keep locale files in sync with a default locale using a language model.

This package contains:
- locale: key-tree diffing and merging
- engine: format adapters (JSON, Markdown/MDX)
- i18n: batching, translation orchestration, deletion guard
- services: model provider
- storage: file access and undo history
- commands: sync, check, add, edit, del, undo
"""

__version__ = "0.1.0"
