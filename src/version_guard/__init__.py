"""Pin an installed application to an old release and block its auto-updater."""

__version__ = "0.3.0"
