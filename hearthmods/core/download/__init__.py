from .downloader import ArchiveDownloader

__all__ = ["ArchiveDownloader"]
