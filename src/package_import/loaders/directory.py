"""Directory (LDAP) loader streaming package entries with ldap3."""

import logging
from typing import Any, Iterator, Optional

from ldap3 import ALL_ATTRIBUTES, NONE, SUBTREE, Connection, Server
from ldap3.core.exceptions import LDAPException

from package_import.config import DirectoryConfig
from package_import.loaders.base import BaseLoader, SourceError
from package_import.models.raw import RawRecord

logger = logging.getLogger(__name__)


class DirectoryLoader(BaseLoader):
    """
    Streams sdcpackage entries from a directory service.
    Entries are decoded as pages arrive. Any failure after the search has
    started raises SourceError: a silently truncated import is worse than
    an aborted one.
    """

    source_id = "ldap"

    def __init__(
        self,
        url: str,
        bind_dn: str,
        password: str,
        *,
        timeout: Optional[float] = None,
        directory: Optional[DirectoryConfig] = None,
    ):
        if not bind_dn or not password:
            raise ValueError("A bind DN and password are required for directory import")
        self.url = url
        self.bind_dn = bind_dn
        self.password = password
        self.timeout = timeout
        self.directory = directory or DirectoryConfig()

    def _connect(self) -> Connection:
        """Open and bind a connection, or raise SourceError."""
        try:
            server = Server(self.url, connect_timeout=self.timeout, get_info=NONE)
            conn = Connection(
                server,
                user=self.bind_dn,
                password=self.password,
                receive_timeout=self.timeout,
                raise_exceptions=True,
            )
            conn.bind()
        except LDAPException as e:
            raise SourceError(f"Cannot bind to {self.url} as {self.bind_dn}: {e}") from e
        return conn

    def _attributes(self, entry: dict[str, Any]) -> dict[str, Any]:
        """Raw attribute values as sent: single values unwrapped, repeats kept as lists."""
        attrs: dict[str, Any] = {}
        for name, values in (entry.get("raw_attributes") or {}).items():
            values = list(values)
            attrs[name] = values[0] if len(values) == 1 else values
        return attrs

    def iter_raw(self) -> Iterator[RawRecord]:
        conn = self._connect()
        count = 0
        try:
            entries = conn.extend.standard.paged_search(
                search_base=self.directory.base,
                search_filter=self.directory.filter,
                search_scope=SUBTREE,
                attributes=ALL_ATTRIBUTES,
                paged_size=self.directory.page_size,
                generator=True,
            )
            for entry in entries:
                if entry.get("type") != "searchResEntry":
                    continue
                count += 1
                yield RawRecord(data=self._attributes(entry), source_ref=entry.get("dn"))
            logger.info("%d packages loaded from %s", count, self.url)
        except LDAPException as e:
            raise SourceError(
                f"Search of {self.directory.base} on {self.url} failed after {count} entries: {e}"
            ) from e
        finally:
            try:
                conn.unbind()
            except LDAPException as e:
                logger.debug("Unbind from %s failed: %s", self.url, e)
