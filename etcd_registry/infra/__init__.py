"""Infrastructure: logging, metrics and the etcd discovery adapter."""
