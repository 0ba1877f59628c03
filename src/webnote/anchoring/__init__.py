"""Anchoring core: structural addresses, span capture, restoration, markers.

Submodules are imported directly (``webnote.anchoring.resolver`` etc.);
``webnote.models`` depends on ``webnote.anchoring.path``, so this package
does not import the modules that depend on the models.
"""
