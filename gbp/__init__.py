"""Track a Go toolchain bump through releases and the tiles that ship them."""

__version__ = "0.1.0"
