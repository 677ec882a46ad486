"""Built-in CLI sub-commands for specdeck.

* :mod:`~specdeck.commands.importer` -- preview an OpenAPI spec or import
  it as a saved request collection.

Each module exports a plain callback function registered directly on the
root app in :mod:`specdeck.app`.
"""
