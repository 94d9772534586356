"""
Estrategia de backup para PostgreSQL
"""
from typing import Dict, List
from .base_strategy import BackupStrategy
from ..errors import DiscoveryError
from ..models import encode_database_name


class PostgreSQLBackupStrategy(BackupStrategy):
    """Estrategia de backup para PostgreSQL (pg_dump / pg_dumpall / psql)"""

    dump_tools = ('psql', 'pg_dump', 'pg_dumpall')

    FIELD_SEPARATOR = ':'

    def connection_args(self) -> List[str]:
        if self.config.is_local_default:
            return []
        args = []
        if self.config.host and self.config.host != 'localhost':
            args.append(f'--host={self.config.host}')
        if self.config.port:
            args.append(f'--port={self.config.port}')
        if self.config.username:
            args.append(f'--username={self.config.username}')
        return args

    def list_databases_command(self) -> List[str]:
        return [
            'psql',
            *self.connection_args(),
            '--list',
            '--no-align',
            '--tuples-only',
            f'--field-separator={self.FIELD_SEPARATOR}',
        ]

    def parse_database_list(self, output: str) -> List[str]:
        """
        Interpreta la salida de psql --list

        Cada fila es nombre:propietario:codificación:...; las líneas sin
        separador son continuaciones de la columna de privilegios.

        Args:
            output: Salida estándar de psql

        Returns:
            Nombres con el espacio codificado
        """
        names = []
        for line in output.splitlines():
            if self.FIELD_SEPARATOR not in line:
                continue
            name = line.split(self.FIELD_SEPARATOR, 1)[0]
            if not name or name == 'Name':
                continue
            names.append(encode_database_name(name))

        if not names:
            raise DiscoveryError("psql no devolvió ninguna base de datos")
        return names

    def database_dump_command(self, database: str) -> List[str]:
        cmd = ['pg_dump', *self.connection_args()]
        if self.config.create_database:
            cmd.append('--create')       # Incluir CREATE DATABASE
        cmd.extend(self.config.pg_dump_opts)
        cmd.append(f'--dbname={self.conninfo_dbname(database)}')
        return cmd

    @staticmethod
    def conninfo_dbname(database: str) -> str:
        """
        Nombre como cadena de conexión libpq (dbname='...')

        Un nombre que empieza con '-' o contiene '=' nunca se interpreta
        como opción de pg_dump ni como parámetros de conexión.
        """
        escaped = database.replace('\\', '\\\\').replace("'", "\\'")
        return f"dbname='{escaped}'"

    def globals_dump_command(self) -> List[str]:
        return ['pg_dumpall', *self.connection_args(), '--globals-only']

    def environment(self) -> Dict[str, str]:
        env = super().environment()
        if self.config.password:
            env['PGPASSWORD'] = self.config.password
        return env
