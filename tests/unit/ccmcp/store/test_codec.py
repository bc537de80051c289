import json
import logging
from unittest.mock import patch

import pytest

from ccmcp.core.exceptions import MalformedDocumentError, StoreIOError
from ccmcp.store.codec import DISABLED_SERVERS_KEY, HostDocument, dump_document

FETCH = {"command": "uvx", "args": ["mcp-server-fetch"]}


def write_host(path, data):
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


class TestReadHostDocument:
    def test_missing_file_is_empty(self, codec):
        doc = codec.read_host_document()
        assert doc.servers == {}
        assert doc.fields == {}

    def test_reads_server_mapping(self, codec, host_path):
        write_host(host_path, {"numStartups": 3, "mcpServers": {"fetch": FETCH}})
        doc = codec.read_host_document()
        assert doc.servers == {"fetch": FETCH}
        assert doc.fields["numStartups"] == 3

    def test_missing_server_key_is_empty(self, codec, host_path):
        write_host(host_path, {"theme": "dark"})
        assert codec.read_host_document().servers == {}

    def test_invalid_json_is_empty_and_logged(self, codec, host_path, caplog):
        host_path.write_text("{ not json", encoding="utf-8")
        with caplog.at_level(logging.WARNING, logger="ccmcp"):
            doc = codec.read_host_document()
        assert doc.servers == {}
        assert "malformed" in caplog.text.lower()

    def test_non_object_document_is_empty(self, codec, host_path):
        host_path.write_text("[1, 2, 3]", encoding="utf-8")
        assert codec.read_host_document().servers == {}

    def test_non_object_server_mapping_is_empty(self, codec, host_path):
        write_host(host_path, {"mcpServers": ["fetch"]})
        assert codec.read_host_document().servers == {}

    def test_custom_servers_key(self, tmp_path, host_path):
        from ccmcp.store.codec import EntryStoreCodec

        codec = EntryStoreCodec(
            host_path=host_path,
            disabled_path=tmp_path / "disabled.json",
            journal_path=tmp_path / "journal.json",
            servers_key="servers",
        )
        write_host(host_path, {"servers": {"fetch": FETCH}})
        assert codec.read_host_document().servers == {"fetch": FETCH}

    def test_unreadable_file_raises(self, codec, host_path):
        write_host(host_path, {})
        with patch("pathlib.Path.read_text", side_effect=PermissionError("denied")):
            with pytest.raises(StoreIOError):
                codec.read_host_document()


class TestWriteHostDocument:
    def test_preserves_unrelated_fields(self, codec, host_path):
        original = {
            "numStartups": 12,
            "mcpServers": {"fetch": FETCH},
            "projects": {"/home/me/app": {"allowedTools": ["Bash"]}},
            "userID": "abc",
        }
        write_host(host_path, original)

        codec.write_host_document(HostDocument(servers={}))

        written = json.loads(host_path.read_text(encoding="utf-8"))
        assert written == {**original, "mcpServers": {}}
        # Field order is kept, with the server mapping in its original position
        assert list(written) == ["numStartups", "mcpServers", "projects", "userID"]

    def test_rereads_document_before_writing(self, codec, host_path):
        write_host(host_path, {"mcpServers": {"fetch": FETCH}})
        doc = codec.read_host_document()

        # Another program changes the file after we read it
        write_host(host_path, {"mcpServers": {"fetch": FETCH}, "tipsHistory": {"a": 1}})
        doc.servers["memory"] = {"command": "npx", "args": []}
        codec.write_host_document(doc)

        written = json.loads(host_path.read_text(encoding="utf-8"))
        assert written["tipsHistory"] == {"a": 1}
        assert set(written["mcpServers"]) == {"fetch", "memory"}

    def test_creates_missing_file(self, codec, host_path):
        codec.write_host_document(HostDocument(servers={"fetch": FETCH}))
        assert json.loads(host_path.read_text(encoding="utf-8")) == {"mcpServers": {"fetch": FETCH}}

    def test_refuses_to_overwrite_invalid_json(self, codec, host_path):
        host_path.write_text("{ not json", encoding="utf-8")
        with pytest.raises(MalformedDocumentError):
            codec.write_host_document(HostDocument(servers={"fetch": FETCH}))
        assert host_path.read_text(encoding="utf-8") == "{ not json"

    def test_output_is_indented_json(self, codec, host_path):
        codec.write_host_document(HostDocument(servers={"fetch": FETCH}))
        assert host_path.read_text(encoding="utf-8") == dump_document({"mcpServers": {"fetch": FETCH}})
        assert '\n  "mcpServers": {' in host_path.read_text(encoding="utf-8")

    def test_write_failure_raises_and_leaves_file(self, codec, host_path):
        write_host(host_path, {"mcpServers": {"fetch": FETCH}})
        before = host_path.read_text(encoding="utf-8")
        with patch("ccmcp.store.codec.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(StoreIOError):
                codec.write_host_document(HostDocument(servers={}))
        assert host_path.read_text(encoding="utf-8") == before
        # No temporary files are left next to the document
        assert [p.name for p in host_path.parent.iterdir()] == [host_path.name]


class TestDisabledStore:
    def test_missing_file_is_empty(self, codec):
        assert codec.read_disabled_store() == {}

    def test_round_trip(self, codec):
        codec.write_disabled_store({"fetch": FETCH})
        assert codec.read_disabled_store() == {"fetch": FETCH}
        assert json.loads(codec.disabled_path.read_text(encoding="utf-8")) == {
            DISABLED_SERVERS_KEY: {"fetch": FETCH}
        }

    def test_invalid_json_is_empty(self, codec):
        codec.disabled_path.parent.mkdir(parents=True)
        codec.disabled_path.write_text("garbage", encoding="utf-8")
        assert codec.read_disabled_store() == {}

    def test_wrong_shape_is_empty(self, codec):
        codec.disabled_path.parent.mkdir(parents=True)
        codec.disabled_path.write_text(json.dumps({DISABLED_SERVERS_KEY: 5}), encoding="utf-8")
        assert codec.read_disabled_store() == {}


class TestJournalDocument:
    def test_empty_journal_removes_file(self, codec):
        codec.write_journal([{"name": "fetch"}])
        assert codec.journal_path.exists()
        codec.write_journal([])
        assert not codec.journal_path.exists()
        assert codec.read_journal() == []

    def test_wrong_shape_is_empty(self, codec):
        codec.journal_path.parent.mkdir(parents=True)
        codec.journal_path.write_text(json.dumps({"pendingMoves": "x"}), encoding="utf-8")
        assert codec.read_journal() == []


class TestSymlinkedDocuments:
    def test_host_document_is_written_through_symlink(self, codec, host_path, tmp_path):
        real = tmp_path / "dotfiles" / "claude.json"
        real.parent.mkdir()
        write_host(real, {"numStartups": 1, "mcpServers": {"fetch": FETCH}})
        host_path.symlink_to(real)

        codec.write_host_document(HostDocument(servers={}))

        assert host_path.is_symlink()
        assert json.loads(real.read_text(encoding="utf-8")) == {"numStartups": 1, "mcpServers": {}}
        # The temporary file is created beside the real document and removed
        assert [p.name for p in real.parent.iterdir()] == ["claude.json"]

    def test_disabled_store_is_written_through_symlink(self, codec, tmp_path):
        real = tmp_path / "synced" / "disabled.json"
        real.parent.mkdir()
        codec.disabled_path.parent.mkdir(parents=True)
        codec.disabled_path.symlink_to(real)

        codec.write_disabled_store({"fetch": FETCH})

        assert codec.disabled_path.is_symlink()
        assert json.loads(real.read_text(encoding="utf-8")) == {DISABLED_SERVERS_KEY: {"fetch": FETCH}}
