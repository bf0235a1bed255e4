"""etcd service registry adapter."""

__version__ = "0.1.0"
