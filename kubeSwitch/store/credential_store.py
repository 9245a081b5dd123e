# kubeSwitch/store/credential_store.py
"""
Filesystem view over the directory of stored kubeconfig files.

Every regular file or symlink below the store root is a context, named by its
path relative to the root. Symlinks are aliases of other contexts; creating
one always stores a relative target so the store can be moved around.
"""
import logging
import os
import stat
import tempfile
from typing import Iterator, List, Optional, Tuple

from kubeSwitch.constants import LINK_SEPARATOR
from kubeSwitch.core.context import EnvironmentState, KubeContext
from kubeSwitch.errors import LinkFormatError, StoreError
from kubeSwitch.store.kubeconfig import read_namespace

logger = logging.getLogger(__name__)


def relative_link_target(source: str, dest: str) -> str:
    """
    Returns the path to store in a symlink at `dest` so that it points at `source`.

    Both paths must be absolute. The result climbs from the destination's
    directory up to the common ancestor of both paths and descends to the source.
    """
    source = os.path.normpath(source)
    dest = os.path.normpath(dest)
    shared = os.path.commonpath([source, dest])
    ups = 0
    dest_dir = os.path.dirname(dest)
    while dest_dir != shared and dest_dir != os.path.dirname(dest_dir):
        ups += 1
        dest_dir = os.path.dirname(dest_dir)
    parts = [os.pardir] * ups + [os.path.relpath(source, shared)]
    return os.path.join(*parts)


class CredentialStore:
    """
    Credential store rooted at a directory.

    Args:
        root: The store root directory (`kube.dir`).
        environment: The declared current context, used to flag contexts as current.
    """

    def __init__(self, root: str, environment: Optional[EnvironmentState] = None):
        self.root = os.path.normpath(root)
        self.environment = environment or EnvironmentState()

    def path_of(self, name: str) -> str:
        """Absolute path of the credential file for `name`."""
        path = os.path.normpath(os.path.join(self.root, name.strip("/")))
        if path != self.root and not path.startswith(self.root.rstrip(os.sep) + os.sep):
            raise StoreError("path escapes the store root", path)
        return path

    def list(self, subdir: Optional[str] = None) -> List[KubeContext]:
        """
        Lists contexts below the root, or below `subdir` when given.

        The walk is depth-first with the entries of each directory in sorted
        order. A missing directory yields an empty list.
        """
        prefix = subdir.strip("/") if subdir else ""
        base = self.path_of(prefix) if prefix else self.root
        contexts = []
        for name, path in self._walk(base, prefix):
            contexts.append(self._build(name, path))
        logger.debug(f"Found {len(contexts)} context(s) under '{base}'")
        return contexts

    def load(self, name: str) -> Optional[KubeContext]:
        """Returns the context stored under `name`, or None if there is no such file."""
        path = self.path_of(name)
        try:
            mode = os.lstat(path).st_mode
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StoreError("stat metadata for kubeconfig", path, e.strerror) from e
        if stat.S_ISDIR(mode):
            raise StoreError("kubeconfig is a directory, add a trailing '/' to select inside it", path)
        return self._build(name.strip("/"), path)

    def is_directory(self, name: str) -> bool:
        """True when `name` is a real directory in the store (a symlink to one is not)."""
        path = self.path_of(name)
        return os.path.isdir(path) and not os.path.islink(path)

    def new_context(self, name: str) -> KubeContext:
        """Describes a context that has no file yet."""
        return KubeContext.build(name.strip("/"), self.path_of(name), None, None, self.environment)

    def current(self) -> Optional[KubeContext]:
        """
        Returns the declared current context, reading its namespace from disk.

        The declared namespace overrides the on-disk one. Returns None when the
        environment declares no current context.
        """
        name = self.environment.current_name
        if not name:
            return None
        path = self.path_of(name)
        return self._build(name, path)

    def create_alias(self, link_spec: str) -> str:
        """
        Creates `<target>` as a symlink alias of `<source>` from a '<source>:<target>' spec.

        Returns:
            The relative path written into the symlink.

        Raises:
            LinkFormatError: if the spec is malformed.
            StoreError: if the source is missing or a directory, or the link cannot be created.
        """
        fields = link_spec.split(LINK_SEPARATOR)
        if len(fields) != 2 or not all(field.strip("/") for field in fields):
            raise LinkFormatError("bad link name format, should be '<source>:<target>'")

        source = self.path_of(fields[0])
        try:
            mode = os.stat(source).st_mode
        except FileNotFoundError as e:
            raise StoreError("link source not found", source) from e
        except OSError as e:
            raise StoreError("read metadata for link source", source, e.strerror) from e
        if stat.S_ISDIR(mode):
            raise StoreError("link source cannot be a dir", source)

        dest = self.path_of(fields[1])
        self._ensure_parent(dest)
        target = relative_link_target(source, dest)
        try:
            os.symlink(target, dest)
        except OSError as e:
            raise StoreError(f"create symlink {target} ->", dest, e.strerror) from e
        logger.info(f"Created alias '{fields[1]}' -> '{fields[0]}' ({target})")
        return target

    def read_bytes(self, name: str) -> bytes:
        """Raw file content; a missing file reads as empty."""
        path = self.path_of(name)
        try:
            with open(path, "rb") as f:
                return f.read()
        except FileNotFoundError:
            return b""
        except OSError as e:
            raise StoreError("read kubeconfig file", path, e.strerror) from e

    def write(self, name: str, content: bytes) -> str:
        """
        Replaces the content of `name` as a whole.

        The data goes to a temporary file in the same directory which is then
        renamed over the destination. Writing to an alias updates the file the
        alias points at.
        """
        path = self.path_of(name)
        if os.path.islink(path):
            path = os.path.realpath(path)
        self._ensure_parent(path)
        directory = os.path.dirname(path)
        try:
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".kubeswitch-", suffix=".tmp")
        except OSError as e:
            raise StoreError("create temp file in", directory, e.strerror) from e
        try:
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(content)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, path)
        except OSError as e:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise StoreError("write kubeconfig file", path, e.strerror) from e
        logger.debug(f"Wrote {len(content)} bytes to '{path}'")
        return path

    def delete(self, name: str) -> None:
        """Removes the file (or alias link) for `name`."""
        path = self.path_of(name)
        try:
            os.remove(path)
        except OSError as e:
            raise StoreError("remove the kubeconfig file", path, e.strerror) from e
        logger.info(f"Removed '{path}'")

    def alias_link(self, path: str) -> Optional[str]:
        """
        Store-relative name of the file a symlink points at.

        Returns None for regular files and for links that resolve outside the store.
        """
        if not os.path.islink(path):
            return None
        try:
            target = os.readlink(path)
        except OSError as e:
            raise StoreError("read symlink", path, e.strerror) from e
        dest = os.path.normpath(os.path.join(os.path.dirname(path), target))
        for root in self._root_variants():
            prefix = root.rstrip(os.sep) + os.sep
            if dest.startswith(prefix):
                link = dest[len(prefix):].strip(os.sep)
                if link:
                    return link.replace(os.sep, "/")
        return None

    def _root_variants(self) -> List[str]:
        roots = [self.root]
        real_root = os.path.realpath(self.root)
        if real_root != self.root:
            roots.append(real_root)
        return roots

    def _build(self, name: str, path: str) -> KubeContext:
        namespace = read_namespace(path)
        link = self.alias_link(path)
        return KubeContext.build(name, path, namespace, link, self.environment)

    def _walk(self, directory: str, prefix: str) -> Iterator[Tuple[str, str]]:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda entry: entry.name)
        except FileNotFoundError:
            return
        except OSError as e:
            raise StoreError("read dir", directory, e.strerror) from e

        for entry in entries:
            name = f"{prefix}/{entry.name}" if prefix else entry.name
            try:
                if entry.is_symlink() or entry.is_file(follow_symlinks=False):
                    yield name, entry.path
                elif entry.is_dir(follow_symlinks=False):
                    yield from self._walk(entry.path, name)
            except OSError as e:
                raise StoreError("stat metadata for", entry.path, e.strerror) from e

    @staticmethod
    def _ensure_parent(path: str) -> None:
        directory = os.path.dirname(path)
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as e:
            raise StoreError("create dir", directory, e.strerror) from e
