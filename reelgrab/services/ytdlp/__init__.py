"""
yt-dlp subprocess adapter for reelgrab.
Runs the yt-dlp command line tool and hands back json metadata or a byte stream.
"""

from .handler import YtDlpExtractor, YtDlpDownloadStream

__all__ = ['YtDlpExtractor', 'YtDlpDownloadStream']
