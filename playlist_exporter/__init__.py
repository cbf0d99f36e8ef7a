"""
playlist-exporter: bulk-export Pipe Bomb playlists to tagged local audio files.
"""

__version__ = "0.1.0"
