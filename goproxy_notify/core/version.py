# Single source for the packaged version and the User-Agent sent to proxies.
__version__ = "2.0.0"
