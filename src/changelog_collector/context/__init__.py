"""Context-building modules for gathering fragment metadata.

These modules fetch data from external sources (GitHub) and return it as
typed context objects the enricher can reason about.
"""
