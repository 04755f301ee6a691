"""Client-side session controller for the Spotify Web API."""

__version__ = "0.1.0"
