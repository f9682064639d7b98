"""OpenShift deployment and pod explorer."""

__version__ = "1.0.0"
