"""
Records and pure logic of a reconciliation run.

This package is responsible for:
* The manifest, ledger and outcome models.
* The error taxonomy shared by every layer.
* Planning which entries to keep, install and remove.
"""
