"""modbot: a line-oriented IRC bot that routes server traffic through hot-loadable modules."""

__version__ = "1.0.0"
