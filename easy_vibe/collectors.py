"""
Latest-version collection from the npm registry.

Resolution walks an ordered list of strategies that share one signature,
``async (package) -> str | None``:

1. ``npm view`` queries through each login shell and invocation variant
2. the registry's ``/latest`` endpoint over urllib
3. the same endpoint over a bare http.client connection

The first non-empty answer wins; a strategy that raises simply yields to the
next one.
"""

from __future__ import annotations

import asyncio
import functools
import http.client
import json
import logging
import urllib.parse
import urllib.request
from typing import Awaitable, Callable, Optional, Sequence

from . import __version__, shell
from .common import combine_output
from .config import DEFAULT_REGISTRY_URL, DEFAULT_SHELLS, Preferences
from .detection import extract_semver
from .shell import ShellCommandError

logger = logging.getLogger(__name__)

USER_AGENT = f"easy-vibe/{__version__}"

LatestStrategy = Callable[[str], Awaitable[Optional[str]]]

# Registry query variants; {package} becomes a single argument
NPM_VIEW_VARIANTS: tuple[tuple[str, ...], ...] = (
    ("npm", "view", "{package}", "version"),
    ("npm", "view", "{package}", "version", "--silent"),
    ("npm", "view", "{package}", "version", "--json"),
    ("/opt/homebrew/bin/npm", "view", "{package}", "version"),
    ("/usr/local/bin/npm", "view", "{package}", "version"),
)


class CollectionError(Exception):
    """Raised when version collection fails."""
    pass


class NetworkError(CollectionError):
    """Raised when network requests fail."""
    pass


class ParseError(CollectionError):
    """Raised when response parsing fails."""
    pass


def parse_registry_output(text: str) -> str:
    """Extract a version from ``npm view`` output.

    JSON-looking output (starting with a quote or brace) is decoded and either
    the bare string or its ``version`` field is used. Anything else yields the
    semantic version it contains, or the trimmed text.

    Args:
        text: Command output

    Returns:
        Version string or empty string

    Raises:
        ParseError: If JSON-looking output cannot be decoded
    """
    text = text.strip()
    if not text:
        return ""

    if text.startswith(("\"", "{")):
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(f"Malformed JSON from registry query: {e}") from e
        if isinstance(data, str):
            return data.strip()
        if isinstance(data, dict):
            version = data.get("version", "")
            return version.strip() if isinstance(version, str) else ""
        return ""

    return extract_semver(text) or text


def registry_latest_url(package: str, registry_url: str = DEFAULT_REGISTRY_URL) -> str:
    """Build the registry "latest" metadata URL for a package.

    The scope separator is percent-encoded (``@scope%2Fname``).
    """
    return f"{registry_url.rstrip('/')}/{urllib.parse.quote(package, safe='@')}/latest"


def _version_from_body(body: bytes, url: str) -> str:
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ParseError(f"Invalid JSON from {url}: {e}") from e
    if not isinstance(data, dict):
        raise ParseError(f"Unexpected payload from {url}: {type(data).__name__}")
    version = data.get("version", "")
    return version.strip() if isinstance(version, str) else ""


def http_get(url: str, timeout: int = 5, headers: dict[str, str] | None = None) -> bytes:
    """Perform HTTP GET request.

    Args:
        url: URL to fetch
        timeout: Timeout in seconds
        headers: Optional HTTP headers

    Returns:
        Response body as bytes

    Raises:
        NetworkError: If request fails
    """
    try:
        default_headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
        if headers:
            default_headers.update(headers)

        req = urllib.request.Request(url, headers=default_headers)
        with urllib.request.urlopen(req, timeout=timeout) as response:
            return response.read()
    except Exception as e:
        raise NetworkError(f"Failed to fetch {url}: {e}") from e


def http_get_raw(url: str, timeout: int = 5) -> bytes:
    """Perform HTTP GET with http.client directly (no urllib handlers).

    Raises:
        NetworkError: If the connection fails or the status is not 200
    """
    parts = urllib.parse.urlsplit(url)
    conn_cls = http.client.HTTPSConnection if parts.scheme == "https" else http.client.HTTPConnection
    path = parts.path or "/"
    if parts.query:
        path = f"{path}?{parts.query}"

    conn = conn_cls(parts.netloc, timeout=timeout)
    try:
        conn.request("GET", path, headers={"User-Agent": USER_AGENT, "Accept": "application/json"})
        response = conn.getresponse()
        body = response.read()
        if response.status != 200:
            raise NetworkError(f"GET {url} returned HTTP {response.status}")
        return body
    except (OSError, http.client.HTTPException) as e:
        raise NetworkError(f"Failed to fetch {url}: {e}") from e
    finally:
        conn.close()


async def query_registry_via_shell(
    package: str,
    variant: Sequence[str],
    shell_name: str,
    timeout: float | None = None,
) -> str | None:
    """Run one ``npm view`` variant in a login shell."""
    argv = [part.replace("{package}", package) for part in variant]
    result = await shell.run_in_login_shell(argv, shell_name, timeout=timeout)
    return parse_registry_output(combine_output(result.stdout, result.stderr)) or None


async def fetch_registry_latest(
    package: str,
    registry_url: str = DEFAULT_REGISTRY_URL,
    timeout: int = 5,
) -> str | None:
    """Fetch the latest version from the registry over urllib."""
    url = registry_latest_url(package, registry_url)
    body = await asyncio.to_thread(http_get, url, timeout)
    return _version_from_body(body, url) or None


async def fetch_registry_latest_raw(
    package: str,
    registry_url: str = DEFAULT_REGISTRY_URL,
    timeout: int = 5,
) -> str | None:
    """Fetch the latest version from the registry over http.client."""
    url = registry_latest_url(package, registry_url)
    body = await asyncio.to_thread(http_get_raw, url, timeout)
    return _version_from_body(body, url) or None


def default_latest_strategies(preferences: Preferences | None = None) -> list[LatestStrategy]:
    """Build the ordered strategy list.

    Args:
        preferences: Shell order, timeouts and registry URL (defaults if None)

    Returns:
        Shell queries for every shell × variant, then urllib, then http.client
    """
    prefs = preferences or Preferences()
    strategies: list[LatestStrategy] = []

    for shell_name in prefs.shells or DEFAULT_SHELLS:
        for variant in NPM_VIEW_VARIANTS:
            strategies.append(functools.partial(
                query_registry_via_shell,
                variant=variant,
                shell_name=shell_name,
                timeout=prefs.timeout_seconds,
            ))

    strategies.append(functools.partial(
        fetch_registry_latest,
        registry_url=prefs.registry_url,
        timeout=prefs.http_timeout_seconds,
    ))
    strategies.append(functools.partial(
        fetch_registry_latest_raw,
        registry_url=prefs.registry_url,
        timeout=prefs.http_timeout_seconds,
    ))
    return strategies


def _strategy_name(strategy: LatestStrategy) -> str:
    if isinstance(strategy, functools.partial):
        name = getattr(strategy.func, "__name__", repr(strategy.func))
        variant = strategy.keywords.get("variant")
        shell_name = strategy.keywords.get("shell_name")
        if variant and shell_name:
            return f"{name}[{shell_name}: {' '.join(variant)}]"
        return name
    return getattr(strategy, "__name__", repr(strategy))


async def resolve_latest(
    package: str,
    strategies: Sequence[LatestStrategy] | None = None,
) -> str:
    """Resolve the latest published version of a package.

    Strategies are awaited one at a time in order; exceptions are logged and
    treated as "no result".

    Args:
        package: npm package name (e.g. "@google/gemini-cli")
        strategies: Ordered strategies (default_latest_strategies() if None)

    Returns:
        Latest version, or empty string if every strategy failed
    """
    if strategies is None:
        strategies = default_latest_strategies()

    for strategy in strategies:
        name = _strategy_name(strategy)
        try:
            version = await strategy(package)
        except (ShellCommandError, CollectionError) as e:
            logger.debug(f"{package}: {name} failed: {e}")
            continue
        except Exception as e:
            # Any stage may fail in ways we don't model; the next stage still runs
            logger.debug(f"{package}: {name} raised {type(e).__name__}: {e}")
            continue
        if version:
            logger.debug(f"{package}: latest {version} via {name}")
            return version

    logger.debug(f"npm {package}: No version found")
    return ""
