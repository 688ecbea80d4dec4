"""ipprobe — domain resolution, public IP, geolocation and latency probing."""

__version__ = "0.1.0"
