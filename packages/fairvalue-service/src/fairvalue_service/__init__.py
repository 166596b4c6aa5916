"""
FairValue Service
=================

HTTP delivery and data acquisition around ``fairvalue_engine``.
"""
