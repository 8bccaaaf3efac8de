"""Running docker commands and copying files to and from a container, locally or over SSH."""

from __future__ import annotations

import getpass
import io
import posixpath
import shlex
import subprocess
import sys
import tarfile
import time
import urllib.parse
from pathlib import Path
from typing import BinaryIO, Iterable, Protocol, Sequence

import paramiko


class DockerError(Exception):
    """Raised when docker cannot be reached or a docker command fails."""


class _Proxy(Protocol):
    def connect(self) -> None: ...

    def run(
        self, args: Sequence[str], stdin: bytes | None = None
    ) -> subprocess.CompletedProcess[bytes]: ...


class LocalProxy:
    """Runs docker on this machine."""

    def connect(self) -> None:
        return None

    def run(
        self, args: Sequence[str], stdin: bytes | None = None
    ) -> subprocess.CompletedProcess[bytes]:
        try:
            return subprocess.run(
                ["docker", *args], input=stdin, capture_output=True, check=False
            )
        except OSError as exc:
            raise DockerError(f"can't run docker: {exc}") from exc


class SSHProxy:
    """Runs docker on a remote machine reached by an ssh:// URL.

    Without a password in the URL, the current user's ~/.ssh/id_rsa key is used.
    """

    def __init__(self, host: str) -> None:
        parsed = urllib.parse.urlsplit(host)
        if parsed.scheme != "ssh":
            raise DockerError(f"unsupported protocol {parsed.scheme}: {host}")
        self.user = parsed.username or ""
        self.host = parsed.hostname or ""
        self.port = parsed.port or 22
        self._password = parsed.password
        self._key: paramiko.PKey | None = None
        self._client: paramiko.SSHClient | None = None
        if self._password is None:
            if not self.user:
                self.user = getpass.getuser()
            key_file = Path.home() / ".ssh" / "id_rsa"
            try:
                self._key = paramiko.RSAKey.from_private_key_file(str(key_file))
            except (OSError, paramiko.SSHException) as exc:
                raise DockerError(f"can't read key {key_file}: {exc}") from exc

    def connect(self) -> None:
        client = paramiko.SSHClient()
        client.load_system_host_keys()
        try:
            client.connect(
                self.host,
                port=self.port,
                username=self.user,
                password=self._password,
                pkey=self._key,
                look_for_keys=False,
                allow_agent=False,
            )
        except (paramiko.SSHException, OSError) as exc:
            client.close()
            raise DockerError(f"can't connect to {self.host}: {exc}") from exc
        self._client = client

    def run(
        self, args: Sequence[str], stdin: bytes | None = None
    ) -> subprocess.CompletedProcess[bytes]:
        if self._client is None:
            raise DockerError("not connected")
        command = ["docker", *args]
        try:
            stdin_file, stdout_file, stderr_file = self._client.exec_command(shlex.join(command))
            if stdin:
                stdin_file.write(stdin)
                stdin_file.flush()
            stdin_file.channel.shutdown_write()
            out = stdout_file.read()
            err = stderr_file.read()
            code = stdout_file.channel.recv_exit_status()
        except (paramiko.SSHException, OSError) as exc:
            raise DockerError(f"can't run docker on {self.host}: {exc}") from exc
        return subprocess.CompletedProcess(command, code, out, err)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


def _tar(files: Iterable[tuple[str, bytes]]) -> bytes:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w") as archive:
        for name, content in files:
            info = tarfile.TarInfo(name)
            info.size = len(content)
            info.mode = 0o644
            info.mtime = int(time.time())
            archive.addfile(info, io.BytesIO(content))
    return buffer.getvalue()


class DockerConnect:
    """A docker service running the given container."""

    def __init__(self, host: str, container: str, proxy: _Proxy) -> None:
        self.host = host
        self.container = container
        self.proxy = proxy

    @classmethod
    def open(cls, host: str, container: str) -> DockerConnect:
        """Connect to docker and check the container runs.

        An empty host or "local" means this machine; otherwise host is an ssh:// URL.
        """
        try:
            proxy: _Proxy = LocalProxy() if host in ("", "local") else SSHProxy(host)
            proxy.connect()
            connection = cls(host, container, proxy)
            connection._check_container()
        except DockerError as exc:
            raise DockerError(f"can't open docker: {exc}") from exc
        return connection

    def _check_container(self) -> None:
        result = self.proxy.run(["ps", "--format", "{{.Names}}"])
        output = (result.stdout or b"") + (result.stderr or b"")
        if self.container in output.decode("utf-8", errors="replace").splitlines():
            return
        raise DockerError(f"container '{self.container}' not found")

    def _run(self, args: Sequence[str], stdin: bytes | None = None) -> subprocess.CompletedProcess[bytes]:
        result = self.proxy.run(list(args), stdin)
        if result.returncode != 0:
            message = (result.stderr or b"").decode("utf-8", errors="replace").strip()
            raise DockerError(f"docker {' '.join(args)}: exit status {result.returncode}: {message}")
        return result

    def _copy_in(self, directory: str, files: Iterable[tuple[str, bytes]]) -> bytes:
        result = self._run(["cp", "-", f"{self.container}:{directory}"], stdin=_tar(files))
        return result.stdout or b""

    def download(self, host_file: str) -> bytes:
        """Return the content of a file of the container."""
        result = self._run(["cp", f"{self.container}:{host_file}", "-"])
        content = bytearray()
        try:
            with tarfile.open(fileobj=io.BytesIO(result.stdout or b""), mode="r|") as archive:
                for member in archive:
                    stream = archive.extractfile(member)
                    if stream is not None:
                        content += stream.read()
        except tarfile.TarError as exc:
            raise DockerError(f"can't read archive of {host_file}: {exc}") from exc
        return bytes(content)

    def upload(self, file: str, data: bytes | BinaryIO) -> None:
        """Write a file into the container."""
        content = data.read() if hasattr(data, "read") else bytes(data)
        directory = posixpath.dirname(file) or "."
        self._copy_in(directory, [(posixpath.basename(file), content)])

    def batch_upload(self, directory: str) -> BatchUploader:
        """Return an uploader that writes several files into a directory of the container."""
        return BatchUploader(self, directory)

    def command(self, *args: str) -> str:
        """Run a docker command and return its standard output."""
        return (self._run(list(args)).stdout or b"").decode("utf-8", errors="replace")


class BatchUploader:
    """Collects files and copies them into the container when closed."""

    def __init__(self, connection: DockerConnect, directory: str) -> None:
        self.connection = connection
        self.directory = directory
        self._files: list[tuple[str, bytes]] = []
        self._closed = False

    def upload(self, name: str, content: bytes) -> None:
        if self._closed:
            raise DockerError("batch uploader is closed")
        self._files.append((name, bytes(content)))

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        output = self.connection._copy_in(self.directory, self._files)
        if output:
            sys.stdout.write(output.decode("utf-8", errors="replace"))

    def __enter__(self) -> BatchUploader:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()