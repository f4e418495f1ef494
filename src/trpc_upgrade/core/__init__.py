"""
Core Package.

Contains the rewrite machinery:
- Source codec (tree-sitter parsing and batch edits)
- Structural matchers and migration tables
- Scope walker, rules, and the engine
"""
