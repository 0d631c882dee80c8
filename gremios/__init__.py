"""
Gremios: rules engine and HTTP backend for the guild investment board game.
"""
