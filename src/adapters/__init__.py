"""Host adapters: command table, Python evaluator, mode detection, Textual host.

Adapters implement the core ports; nothing in core imports from here.
"""
