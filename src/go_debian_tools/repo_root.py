"""Repository root resolution for Go import paths.

Several Go modules can live in one repository, and Debian usually packages
the repository as a whole under its root import path. Well-known hosters
are resolved from the path alone; vanity import paths are resolved by
reading the <meta name="go-import"> tag served at ?go-get=1.
"""

import logging

import requests
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

# Hosters whose repository root is always host/owner/repo
THREE_ELEMENT_HOSTS = {"github.com", "bitbucket.org", "codeberg.org", "git.sr.ht"}

GO_GET_TIMEOUT_SECONDS = 15


def parse_go_import_prefixes(html: str) -> list[str]:
    """Extract import prefixes from go-import meta tags in an HTML page."""
    soup = BeautifulSoup(html, "html.parser")
    prefixes = []
    for meta in soup("meta", {"name": "go-import"}):
        fields = (meta.get("content") or "").split()
        if len(fields) == 3:
            prefixes.append(fields[0])
    return prefixes


def static_repo_root(import_path: str) -> str | None:
    """Derive the repository root from the import path alone.

    Args:
        import_path: Go import path

    Returns:
        Repository root, or None if it cannot be derived without a lookup

    Examples:
        >>> static_repo_root("github.com/foo/bar/baz")
        "github.com/foo/bar"
        >>> static_repo_root("gopkg.in/yaml.v3")
        "gopkg.in/yaml.v3"
        >>> static_repo_root("example.org/foo")
        None
    """
    parts = import_path.split("/")
    host = parts[0]

    if host in THREE_ELEMENT_HOSTS or (host == "golang.org" and parts[1:2] == ["x"]):
        if len(parts) < 3:
            return None
        return "/".join(parts[:3])

    if host == "gopkg.in" and len(parts) >= 2:
        # gopkg.in/pkg.v3 or gopkg.in/user/pkg.v3
        if ".v" in parts[1]:
            return "/".join(parts[:2])
        if len(parts) >= 3:
            return "/".join(parts[:3])

    return None


class RepoRootResolver:
    """Resolves import paths to repository roots, with caching.

    Example:
        resolver = RepoRootResolver(allow_network=False)
        resolver.resolve("github.com/foo/bar/v2")  # "github.com/foo/bar"
    """

    def __init__(
        self,
        allow_network: bool = True,
        session: requests.Session | None = None,
        timeout: float = GO_GET_TIMEOUT_SECONDS,
    ):
        """Initialize resolver.

        Args:
            allow_network: Query ?go-get=1 pages for vanity import paths
            session: HTTP session to use (a new one is created if None)
            timeout: HTTP timeout in seconds
        """
        self.allow_network = allow_network
        self.session = session
        self.timeout = timeout
        self._cache: dict[str, str] = {}

    def resolve(self, import_path: str) -> str:
        """Return the repository root of an import path.

        Falls back to the import path itself when the root cannot be
        determined; this is logged but is not an error.
        """
        if import_path in self._cache:
            return self._cache[import_path]

        root = static_repo_root(import_path)
        if root is None and self.allow_network:
            root = self._lookup_go_import(import_path)
        if root is None:
            logger.info(f"Could not determine repo path for import path {import_path!r}")
            root = import_path

        self._cache[import_path] = root
        return root

    __call__ = resolve

    def _lookup_go_import(self, import_path: str) -> str | None:
        """Query the go-get page and return the longest matching prefix."""
        if self.session is None:
            self.session = requests.Session()

        url = f"https://{import_path}?go-get=1"
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.debug(f"go-get lookup for {import_path!r} failed: {e}")
            return None

        matches = [
            prefix
            for prefix in parse_go_import_prefixes(response.text)
            if import_path == prefix or import_path.startswith(prefix + "/")
        ]
        if not matches:
            return None
        return max(matches, key=len)
