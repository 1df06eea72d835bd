# Path: core/uploads/servers.py
# Purpose: Persist upload servers, dispatch them to registered protocols, and record upload provenance.
# Layer: core/uploads.
# Details: Upload rows written here are what the search filter's server_ids predicate matches against.

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime
from typing import Callable, Dict, List, Optional

from core.errors import NotFound
from core.models.domain import Clip, Server, UploadRecord
from core.store.sqlite_store import ClipStore

from .base import Uploader, UploadProtocol

logger = logging.getLogger(__name__)


class ServerService:
    """CRUD over server records plus protocol lookup and uploads.

    The protocol list is the canonical registry of transports; servers refer to
    protocols by name.
    """

    def __init__(
        self,
        store: ClipStore,
        protocols: List[UploadProtocol],
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._store = store
        self._protocols = list(protocols)
        self._clock = clock

    # Servers
    def get_all(self) -> List[Server]:
        rows = self._store.run("SELECT * FROM servers ORDER BY id", operation="list_servers").rows
        return [_server_from_row(row) for row in rows]

    def get_all_upload_enabled(self) -> List[Server]:
        rows = self._store.run(
            "SELECT * FROM servers WHERE upload_enabled = 1 ORDER BY id",
            operation="list_servers",
        ).rows
        return [_server_from_row(row) for row in rows]

    def find_by_id(self, server_id: int) -> Server:
        rows = self._store.run(
            "SELECT * FROM servers WHERE id = :id",
            {"id": server_id},
            operation="find_server",
            target=server_id,
        ).rows
        if not rows:
            raise NotFound("no server with this id", operation="find_server", target=server_id)
        return _server_from_row(rows[0])

    def append(self, server: Server) -> Server:
        """Insert ``server`` and assign its generated id."""

        self.find_protocol(server.protocol)
        result = self._store.run(
            """
            INSERT INTO servers (name, protocol, settings, upload_enabled, output_format_id)
            VALUES (:name, :protocol, :settings, :upload_enabled, :output_format_id)
            """,
            _server_params(server),
            operation="append_server",
            target=server.name,
        )
        server.id = result.last_insert_id
        logger.info("Added server %d (%s via %s)", server.id, server.name, server.protocol)
        return server

    def update(self, server: Server) -> None:
        self.find_protocol(server.protocol)
        params = _server_params(server)
        params["id"] = server.id
        result = self._store.run(
            """
            UPDATE servers
            SET name = :name, protocol = :protocol, settings = :settings,
                upload_enabled = :upload_enabled, output_format_id = :output_format_id
            WHERE id = :id
            """,
            params,
            operation="update_server",
            target=server.id,
        )
        if result.rowcount == 0:
            raise NotFound("no server with this id", operation="update_server", target=server.id)

    def save(self, server: Server) -> Server:
        """Insert transient servers (id 0), update persisted ones."""

        if server.id:
            self.update(server)
            return server
        return self.append(server)

    def remove(self, server_id: int) -> None:
        """Delete a server and the upload records pointing at it; unknown ids are ignored."""

        params = {"server_id": server_id}
        with self._store.transaction():
            self._store.run("DELETE FROM uploads WHERE server_id = :server_id", params, "remove_server", server_id)
            self._store.run("DELETE FROM servers WHERE id = :server_id", params, "remove_server", server_id)

    def set_upload_enabled(self, server_id: int, enabled: bool) -> None:
        self._set_column(server_id, "upload_enabled", int(enabled))

    def set_output_format_id(self, server_id: int, output_format_id: Optional[int]) -> None:
        self._set_column(server_id, "output_format_id", output_format_id)

    def _set_column(self, server_id: int, column: str, value: object) -> None:
        result = self._store.run(
            f"UPDATE servers SET {column} = :value WHERE id = :id",
            {"value": value, "id": server_id},
            operation=f"set_{column}",
            target=server_id,
        )
        if result.rowcount == 0:
            raise NotFound("no server with this id", operation=f"set_{column}", target=server_id)

    # Protocols
    def get_protocols(self) -> List[UploadProtocol]:
        return list(self._protocols)

    def find_protocol(self, name: str) -> UploadProtocol:
        for protocol in self._protocols:
            if protocol.can_handle(name):
                return protocol
        raise NotFound("no protocol registered under this name", operation="find_protocol", target=name)

    def create_uploader(self, server: Server) -> Uploader:
        return self.find_protocol(server.protocol).create_uploader(server)

    # Uploads
    def upload(self, clip: Clip, server: Server) -> UploadRecord:
        """Upload ``clip`` through ``server`` and record where it landed."""

        url = self.create_uploader(server).upload(clip)
        uploaded_at = self._clock().replace(microsecond=0)
        result = self._store.run(
            """
            INSERT INTO uploads (clip_id, server_id, url, uploaded_at)
            VALUES (:clip_id, :server_id, :url, :uploaded_at)
            """,
            {
                "clip_id": clip.id,
                "server_id": server.id,
                "url": url,
                "uploaded_at": uploaded_at.isoformat(sep=" "),
            },
            operation="record_upload",
            target=clip.id,
        )
        logger.info("Uploaded clip %d to server %d: %s", clip.id, server.id, url)
        return UploadRecord(
            id=result.last_insert_id,
            clip_id=clip.id,
            server_id=server.id,
            url=url,
            uploaded_at=uploaded_at,
        )

    def uploads_of(self, clip_id: int) -> List[UploadRecord]:
        rows = self._store.run(
            "SELECT * FROM uploads WHERE clip_id = :clip_id ORDER BY id",
            {"clip_id": clip_id},
            operation="uploads_of",
            target=clip_id,
        ).rows
        return [
            UploadRecord(
                id=int(row["id"]),
                clip_id=int(row["clip_id"]),
                server_id=int(row["server_id"]),
                url=str(row["url"]),
                uploaded_at=datetime.fromisoformat(row["uploaded_at"]) if row["uploaded_at"] else None,
            )
            for row in rows
        ]


def _server_params(server: Server) -> Dict[str, object]:
    return {
        "name": server.name,
        "protocol": server.protocol,
        "settings": json.dumps(server.settings),
        "upload_enabled": int(server.upload_enabled),
        "output_format_id": server.output_format_id,
    }


def _server_from_row(row: sqlite3.Row) -> Server:
    try:
        settings = json.loads(row["settings"]) if row["settings"] else {}
    except json.JSONDecodeError as exc:
        logger.warning("Ignoring unreadable settings of server %s: %s", row["id"], exc)
        settings = {}
    return Server(
        id=int(row["id"]),
        name=str(row["name"]),
        protocol=str(row["protocol"]),
        settings={str(key): str(value) for key, value in settings.items()},
        upload_enabled=bool(row["upload_enabled"]),
        output_format_id=int(row["output_format_id"]) if row["output_format_id"] is not None else None,
    )
