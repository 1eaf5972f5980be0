from pathlib import Path
from typing import Callable, Optional

import requests

from ..errors import FileCreateError, FileWriteError, HTTPClientError


class ArchiveDownloader:
    """Handles release archive downloads"""

    def __init__(self, session: Optional[requests.Session] = None, timeout: int = 60):
        self.timeout = timeout
        # Persistent session, reused for every archive
        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': 'HearthMods/1.0',
            'Accept-Encoding': 'gzip, deflate',
            'Connection': 'keep-alive'
        })

    def download(
        self,
        url: str,
        destination: Path,
        progress_callback: Optional[Callable[[int], None]] = None
    ) -> Path:
        """
        Downloads an archive from the provided URL

        Args:
            url: Archive URL
            destination: File the archive is written to
            progress_callback: Callback function to update progress (0-100)

        Returns:
            The destination path

        Raises:
            HTTPClientError: The request failed or returned an error status
            FileCreateError: The destination file could not be created
            FileWriteError: The body could not be written to disk
        """
        try:
            response = self.session.get(url, stream=True, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise HTTPClientError(f"download failed for {url}: {exc}") from exc

        with response:
            total_size = int(response.headers.get('content-length', 0) or 0)
            downloaded_size = 0
            last_progress = 0
            chunk_size = 1024 * 1024

            try:
                file = open(destination, 'wb')
            except OSError as exc:
                raise FileCreateError(f"unable to create {destination}") from exc

            with file:
                try:
                    for chunk in response.iter_content(chunk_size=chunk_size):
                        if not chunk:
                            continue
                        file.write(chunk)
                        downloaded_size += len(chunk)

                        # Only report when the percentage actually changes
                        if total_size > 0 and progress_callback:
                            progress = int((downloaded_size / total_size) * 100)
                            if progress != last_progress:
                                progress_callback(progress)
                                last_progress = progress
                except requests.RequestException as exc:
                    raise HTTPClientError(f"download interrupted for {url}: {exc}") from exc
                except OSError as exc:
                    raise FileWriteError(f"unable to write {destination}") from exc

        if progress_callback:
            progress_callback(100)

        return destination
