"""
solder-sync: keep a Minecraft server directory in sync with a Technic Solder build.

The package is organised the same way throughout:
* ``domain`` holds the records of a run and the pure planning logic.
* ``services`` holds the I/O: HTTP, archives, tracked files, the run itself.
* ``storage`` persists the ledger of installed mods.
* ``core`` reads configuration and builds shared instances.
"""

__version__ = "0.1.0"
