"""
CommanderForge services.

Business logic for commander deck building and collection management.
Import from the submodules directly; the filtering package depends on
services.vocabulary, so this package does not re-export the builder.
"""
