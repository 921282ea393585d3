"""Tests for connection string parsing."""

import pytest

from snap_orchestrator.core.connection import (
    ConnectionStringError,
    parse_connection_string,
)


class TestParseConnectionString:
    """Tests for parse_connection_string."""

    def test_basic(self):
        info = parse_connection_string("Server=db1;Database=Orders")
        assert info.server == "db1"
        assert info.database == "Orders"
        assert info.user is None

    def test_synonyms(self):
        info = parse_connection_string(
            "Data Source=tcp:db1,1433;Initial Catalog=Orders;UID=sa;PWD=secret"
        )
        assert info.server == "tcp:db1,1433"
        assert info.database == "Orders"
        assert info.user == "sa"
        assert info.password == "secret"

    def test_keys_case_insensitive_and_trimmed(self):
        info = parse_connection_string("  SERVER = db1 ; database= Orders ;")
        assert info.server == "db1"
        assert info.database == "Orders"

    def test_quoted_value(self):
        info = parse_connection_string("Server=db1;Password='a;b=c';Database=\"x\"\"y\"")
        assert info.password == "a;b=c"
        assert info.database == 'x"y'

    def test_flags(self):
        info = parse_connection_string(
            "Server=db1;Integrated Security=SSPI;TrustServerCertificate=True"
        )
        assert info.integrated_security is True
        assert info.trust_server_certificate is True

    def test_flags_default_false(self):
        info = parse_connection_string("Server=db1")
        assert info.integrated_security is False
        assert info.trust_server_certificate is False

    def test_options_keep_everything(self):
        info = parse_connection_string("Server=db1;Encrypt=yes")
        assert info.options == {"server": "db1", "encrypt": "yes"}

    def test_empty(self):
        info = parse_connection_string("")
        assert info.server is None and info.database is None

    def test_segment_without_equals(self):
        with pytest.raises(ConnectionStringError, match="invalid near 'garbage'"):
            parse_connection_string("Server=db1;garbage")

    def test_unterminated_quote(self):
        with pytest.raises(ConnectionStringError, match="Unterminated"):
            parse_connection_string("Server='db1")

    def test_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_connection_string("nope")

