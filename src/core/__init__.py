"""Core domain package for evalshade.

Core holds the dirty/clean state machine, the style applier, and the command
watcher without any Textual or evaluator-specific code, so it can sit behind
any host that implements the ports.
"""
