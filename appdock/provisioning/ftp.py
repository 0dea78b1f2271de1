"""FTP side channel: push auxiliary files to an app's wwwroot over FTPS."""

import ftplib
import logging
import posixpath

from appdock.provisioning.types import HostingResource, ProviderError
from appdock.redact import register_secret

logger = logging.getLogger(__name__)

FTP_PORT = 21


class FtpUploader:
    """Upload files through the publishing profile's FTP endpoint.

    Args:
        client: object exposing ``get_publishing_profile(resource)`` (the ArmClient).
        dry_run: log uploads instead of connecting.
        ftp_factory: callable returning an ``ftplib.FTP_TLS``-compatible object.
    """

    def __init__(self, client, dry_run=False, timeout=60, ftp_factory=ftplib.FTP_TLS):
        self.client = client
        self.dry_run = dry_run
        self.timeout = timeout
        self.ftp_factory = ftp_factory

    def push(self, resource: HostingResource, files):
        """Upload ``(local_path, remote_relative_path)`` pairs below the profile root."""
        files = list(files)
        if not files:
            return

        profile = self.client.get_publishing_profile(resource)
        register_secret(profile.password)
        if self.dry_run:
            for local, remote in files:
                logger.info(f"[dry-run] ftp {local} -> {profile.host}:{posixpath.join(profile.root, remote)}")
            return

        logger.info(f"Uploading {len(files)} file(s) to {profile.host} via FTP...")
        try:
            with self.ftp_factory(timeout=self.timeout) as ftp:
                ftp.connect(profile.host, FTP_PORT)
                ftp.login(profile.username, profile.password)
                ftp.prot_p()
                created = set()
                for local, remote in files:
                    target = posixpath.join(profile.root, remote)
                    _ensure_remote_dirs(ftp, posixpath.dirname(target), created)
                    with open(local, "rb") as f:
                        ftp.storbinary(f"STOR {target}", f)
                    logger.info(f"  {local} -> {target}")
        except ftplib.all_errors as e:
            raise ProviderError(f"FTP upload to {profile.host} failed: {e}") from e


def _ensure_remote_dirs(ftp, directory, created):
    """Create *directory* and its parents on the server, skipping ones already known."""
    path = ""
    for part in [p for p in directory.split("/") if p]:
        path = f"{path}/{part}"
        if path in created:
            continue
        try:
            ftp.mkd(path)
        except ftplib.error_perm as e:
            # 550: directory already exists
            if not str(e).startswith("550"):
                raise
        created.add(path)
