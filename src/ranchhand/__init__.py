"""ranchhand - ranch management core: orders, quotes, ranch fund and map."""

__version__ = "0.1.0"
