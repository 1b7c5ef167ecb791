"""Textual editor frontend for evalshade."""
