"""
reelgrab - paste an instagram link, pick a quality, get the mp4
"""

__version__ = "0.1.0"
