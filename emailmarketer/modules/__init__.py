"""
Feature modules. Each blueprint module declares its Blueprint in
``__init__.py`` and registers its routes by importing ``routes``.
"""
