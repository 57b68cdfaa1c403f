"""Audio tag editing and FLAC to MP3 conversion through external tools."""

__version__ = "0.1.0"
