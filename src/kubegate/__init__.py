"""kubegate: generic list/get/create of Kubernetes resource kinds across datacenters."""

__version__ = "0.1.0"
