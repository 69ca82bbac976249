"""Download IMERG precipitation GeoTIFFs from the GPM PPS archive."""

__version__ = "0.1.0"
