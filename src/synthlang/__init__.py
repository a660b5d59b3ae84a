"""synthlang: interpreter for indented instrument description documents."""

__version__ = "0.1.0"
