"""
Repositorio para manejar configuración (Dependency Inversion)
"""
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional
from ..config import Config
from ..logger import LoggerService
from ..models import BackupConfig, RetentionPolicy


class ConfigRepository:
    """Repositorio para manejar configuración"""

    def __init__(self, config_file: Optional[Path] = None):
        """
        Inicializa el repositorio de configuración

        Args:
            config_file: Ruta al archivo de configuración (opcional)
        """
        self.config_file = Path(config_file) if config_file else Config.config_file()
        self.logger = LoggerService.get_logger("ConfigRepository")
        self._raw_config = None

    def load(self) -> Dict:
        """
        Carga configuración desde archivo JSON

        Returns:
            Diccionario con la configuración (valores por defecto completados)
        """
        raw = {}
        if not self.config_file.exists():
            self.logger.warning(f"El archivo de configuración no existe: {self.config_file}")
        else:
            try:
                with open(self.config_file, "r", encoding='utf-8') as f:
                    raw = json.load(f)
                self.logger.info(f"Configuración cargada exitosamente: {self.config_file}")
            except json.JSONDecodeError as e:
                self.logger.error(f"Error al parsear JSON: {e}")
            except OSError as e:
                self.logger.error(f"Error al cargar la configuración: {e}")

        if not isinstance(raw, dict):
            self.logger.error("La configuración debe ser un objeto JSON plano")
            raw = {}

        unknown = sorted(set(raw) - set(Config.DEFAULT_CONFIG))
        for key in unknown:
            self.logger.warning(f"Opción de configuración desconocida ignorada: {key}")

        self._raw_config = {**Config.DEFAULT_CONFIG, **raw}
        return self._raw_config

    def get_backup_config(self) -> BackupConfig:
        """
        Construye la configuración inmutable de la ejecución

        Returns:
            Objeto BackupConfig

        Raises:
            ValueError: Si algún valor es inválido
        """
        if self._raw_config is None:
            self.load()

        raw = {key: self._resolve(value) for key, value in self._raw_config.items()}

        return BackupConfig(
            backup_dir=Path(raw['backup_dir']).expanduser(),
            db_type=str(raw['db_type']).lower(),
            host=raw['host'] or None,
            port=int(raw['port']) if raw['port'] not in (None, '') else None,
            username=raw['username'] or None,
            password=raw['password'] or '',
            dbnames=self._parse_dbnames(raw['dbnames']),
            dbexclude=self._as_tuple(raw['dbexclude']),
            globals_objects=raw['globals_objects'],
            create_database=self._as_bool(raw['create_database']),
            doweekly=int(raw['doweekly']),
            domonthly=int(raw['domonthly']),
            retention=RetentionPolicy(
                daily=int(raw['brdaily']),
                weekly=int(raw['brweekly']),
                monthly=int(raw['brmonthly']),
            ),
            compression=self._parse_compression(raw['compression']),
            compression_opts=self._as_tuple(raw['compression_opts']),
            encryption=self._as_bool(raw['encryption']),
            encryption_public_key=raw['encryption_public_key'] or '',
            encryption_cipher=raw['encryption_cipher'] or 'aes256',
            encryption_suffix=raw['encryption_suffix'] or '',
            pre_backup=raw['pre_backup'] or '',
            post_backup=raw['post_backup'] or '',
            ext=str(raw['ext']).lstrip('.'),
            perm=self._parse_perm(raw['perm']),
            pg_dump_opts=self._as_tuple(raw['pg_dump_opts']),
            command_timeout=float(raw['command_timeout']),
            log_dir=Path(raw['log_dir']).expanduser() if raw['log_dir'] else None,
            mail_addr=raw['mail_addr'] or '',
            mail_from=raw['mail_from'] or '',
            smtp_host=raw['smtp_host'] or 'localhost',
            smtp_port=int(raw['smtp_port']),
            schedule=self._as_tuple(raw['schedule']),
        )

    def _resolve(self, value: Any) -> Any:
        """Resuelve referencias ${VAR} en cadenas y listas"""
        if isinstance(value, list):
            return [self._resolve_credential(v) if isinstance(v, str) else v for v in value]
        if isinstance(value, str):
            return self._resolve_credential(value)
        return value

    def _resolve_credential(self, value: str) -> str:
        """
        Resuelve credencial desde variable de entorno si es necesario

        Args:
            value: Valor que puede contener referencia a variable de entorno

        Returns:
            Valor resuelto
        """
        if value.startswith("${") and value.endswith("}"):
            env_var = value[2:-1]
            resolved = os.getenv(env_var, "")
            if not resolved:
                self.logger.warning(f"Variable de entorno no encontrada: {env_var}")
            return resolved
        return value

    @staticmethod
    def _as_tuple(value) -> tuple:
        if value in (None, ''):
            return ()
        if isinstance(value, str):
            return tuple(value.split())
        return tuple(str(v) for v in value)

    @staticmethod
    def _as_bool(value) -> bool:
        if isinstance(value, str):
            return value.strip().lower() in ('yes', 'true', '1', 'on')
        return bool(value)

    @classmethod
    def _parse_dbnames(cls, value):
        """'all' (o vacío) activa el descubrimiento; si no, lista fija"""
        names = cls._as_tuple(value)
        if not names or names == ('all',):
            return None
        return names

    @staticmethod
    def _parse_compression(value) -> Optional[str]:
        if not value or str(value).lower() == 'none':
            return None
        return str(value)

    @staticmethod
    def _parse_perm(value) -> int:
        """Permisos en octal: "600", "0o600" o 600 (dígitos octales)"""
        text = str(value).strip().lower()
        if text.startswith('0o'):
            text = text[2:]
        try:
            return int(text, 8)
        except ValueError:
            raise ValueError(f"perm debe ser un modo octal válido: {value}")
