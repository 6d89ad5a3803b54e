from reelgrab.services import instagram, ytdlp

__all__ = ["instagram", "ytdlp"]
