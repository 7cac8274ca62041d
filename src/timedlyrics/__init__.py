"""TimedLyrics - turn provider-aligned lyrics into synchronized lyric files."""

__version__ = "1.0.0"
