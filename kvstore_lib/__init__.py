"""Single-key JSON document store over HTTP, backed by Tarantool."""

__version__ = "0.1.0"
