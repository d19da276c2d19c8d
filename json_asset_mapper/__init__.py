"""Core logic for JSON Asset Mapper.

The Gradio UI lives in `app.py`. This package contains pure functions that:
- load entries/assets JSON arrays
- build field mappings (with default heuristics)
- index assets and merge replacement values into entries
- serialize/export merged results
"""
