"""Domain modules.

Package ``__init__`` files export models and exceptions only; services
live in ``<module>.service`` and are imported from there, since the
SQL repositories depend on the domain models.
"""
