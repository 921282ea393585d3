"""SQL Server runner.

Full database backups and restores are issued through ``sqlcmd`` against the
server named in the target's ConnectionString. The backup file is written by
the server into its backup directory and then relocated into the artifact
store (out of the container when the server runs in Docker).

Properties:
    ConnectionString: Required. Server and database to work on.
    ContainerId: Required when the target runs in Docker.
    BackupDirectory: Server-side backup directory. Queried from the server
        when absent.
    SqlCmd: sqlcmd executable (default "sqlcmd").
    StartupTimeout: Seconds to wait for a containerized server to accept
        logins again after its container was restarted (default 60).
"""

import logging
import os
import subprocess
import time
from typing import Optional

from ..__util__ import BackendError
from ..config.schema import TargetConfig
from ..core.connection import ConnectionInfo, parse_connection_string
from ..core.naming import CONNECTION_STRING
from .base import TargetRunner

logger = logging.getLogger(__name__)

BACKUP_DIRECTORY = "BackupDirectory"
SQLCMD = "SqlCmd"
STARTUP_TIMEOUT = "StartupTimeout"

DEFAULT_STARTUP_TIMEOUT = 60
POLL_INTERVAL = 2


def quote_identifier(name: str) -> str:
    """Bracket-quote a SQL Server identifier."""
    return "[" + name.replace("]", "]]") + "]"


def quote_literal(value: str) -> str:
    """Quote a value as an N'' string literal."""
    return "N'" + value.replace("'", "''") + "'"


class MssqlRunner(TargetRunner):
    """Pack, restore and clean SQL Server databases."""

    type = "mssql"
    artifact_suffix = ".bkp"

    def _connection(self, target: TargetConfig) -> ConnectionInfo:
        info = parse_connection_string(
            self.config.require_property(target, CONNECTION_STRING)
        )
        if not info.server or not info.database:
            raise BackendError(
                f"Connection string of target '{target}' must name a server and a database"
            )
        return info

    def _sqlcmd(
        self,
        target: TargetConfig,
        info: ConnectionInfo,
        query: str,
        login_timeout: Optional[int] = None,
    ) -> str:
        """Run query on the master database and return sqlcmd's output."""
        cmd = [
            self.config.get_property(target, SQLCMD, "sqlcmd"),
            "-S",
            info.server,
            "-d",
            "master",
            "-b",
            "-h",
            "-1",
            "-W",
            "-Q",
            query,
        ]
        env = dict(os.environ)
        if info.integrated_security or not info.user:
            cmd.append("-E")
        else:
            cmd += ["-U", info.user]
            # keeps the password off the process list
            env["SQLCMDPASSWORD"] = info.password or ""
        if info.trust_server_certificate:
            cmd.append("-C")
        if login_timeout is not None:
            cmd += ["-l", str(login_timeout)]

        logger.debug("Executing sqlcmd on %s: %s", info.server, query)
        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, env=env, check=False
            )
        except OSError as e:
            raise BackendError(f"Could not run {cmd[0]}: {e}") from e

        if result.returncode != 0:
            detail = (result.stderr.strip() or result.stdout.strip())
            raise BackendError(
                f"sqlcmd failed on {info.server} (exit {result.returncode}): {detail}"
            )
        return result.stdout

    def wait_for_server(self, target: TargetConfig, info: ConnectionInfo) -> None:
        """Poll the server until it accepts logins or StartupTimeout runs out."""
        raw = self.config.get_property(target, STARTUP_TIMEOUT, DEFAULT_STARTUP_TIMEOUT)
        try:
            timeout = float(raw)
        except (TypeError, ValueError) as e:
            raise BackendError(
                f"'{STARTUP_TIMEOUT}' of target '{target}' must be a number of seconds, got {raw!r}"
            ) from e

        deadline = time.monotonic() + timeout
        while True:
            try:
                self._sqlcmd(target, info, "SELECT 1", login_timeout=POLL_INTERVAL)
                return
            except BackendError as e:
                if time.monotonic() >= deadline:
                    raise BackendError(
                        f"Server {info.server} did not accept logins within {timeout:g}s: {e}"
                    ) from e
            logger.debug("Waiting for %s to accept logins ...", info.server)
            time.sleep(POLL_INTERVAL)

    def backup_directory(self, target: TargetConfig, info: ConnectionInfo) -> str:
        """The directory the server writes backups to, as the server sees it."""
        directory = self.config.get_property(target, BACKUP_DIRECTORY)
        if directory:
            return directory

        output = self._sqlcmd(
            target,
            info,
            "SET NOCOUNT ON; SELECT CAST(SERVERPROPERTY('InstanceDefaultBackupPath') AS nvarchar(4000))",
        )
        lines = [line.strip() for line in output.splitlines() if line.strip()]
        if not lines or lines[-1].upper() == "NULL":
            raise BackendError(
                f"Server {info.server} did not report a backup directory, "
                f"set the '{BACKUP_DIRECTORY}' property"
            )
        return lines[-1]

    def pack(self, target: TargetConfig) -> None:
        info = self._connection(target)
        name = self.artifact_name(target)
        backend_file = self.backend_path(target, self.backup_directory(target, info), name)

        logger.info("Backing up database %s on %s ...", info.database, info.server)
        self._sqlcmd(
            target,
            info,
            f"BACKUP DATABASE {quote_identifier(info.database)} "
            f"TO DISK = {quote_literal(str(backend_file))} "
            f"WITH INIT, FORMAT, "
            f"NAME = {quote_literal(info.database + ' Backup')}, "
            f"DESCRIPTION = {quote_literal('Full backup of ' + info.database)}",
        )

        destination = self.fetch_artifact(target, backend_file, name)
        if target.is_running_in_docker:
            # the copy restarted the container
            self.wait_for_server(target, info)

        if destination is None:
            logger.warning("Skipped %s: no backup file was stored", info.database)
        else:
            logger.info("Packed %s into %s", info.database, destination)

    def restore(self, target: TargetConfig) -> None:
        info = self._connection(target)
        name = self.artifact_name(target)
        backend_file = self.backend_path(target, self.backup_directory(target, info), name)

        self.deliver_artifact(target, backend_file, name)
        if target.is_running_in_docker:
            self.wait_for_server(target, info)

        database = quote_identifier(info.database)
        logger.info("Restoring database %s on %s ...", info.database, info.server)
        self._sqlcmd(
            target,
            info,
            f"IF DB_ID({quote_literal(info.database)}) IS NOT NULL "
            f"ALTER DATABASE {database} SET SINGLE_USER WITH ROLLBACK IMMEDIATE; "
            f"RESTORE DATABASE {database} FROM DISK = {quote_literal(str(backend_file))} "
            f"WITH REPLACE, RECOVERY; "
            f"ALTER DATABASE {database} SET MULTI_USER;",
        )
        logger.info("Restored %s from %s", info.database, name)

    def clean(self, target: TargetConfig) -> None:
        info = self._connection(target)
        database = quote_identifier(info.database)

        logger.info("Dropping database %s on %s ...", info.database, info.server)
        self._sqlcmd(
            target,
            info,
            f"IF DB_ID({quote_literal(info.database)}) IS NOT NULL BEGIN "
            f"ALTER DATABASE {database} SET SINGLE_USER WITH ROLLBACK IMMEDIATE; "
            f"DROP DATABASE {database}; END",
        )
