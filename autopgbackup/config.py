"""
Constantes y valores por defecto del sistema de backup
"""
import logging
import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv, find_dotenv


class Config:
    """Constantes del sistema (sin estado mutable de ejecución)"""

    # BASE_DIR es la raíz donde está main.py
    BASE_DIR = Path(__file__).resolve().parents[1]

    CONFIG_ENV_VAR = "AUTOPGBACKUP_CONFIG"
    CONFIG_FILE = BASE_DIR / "config.json"

    LOG_LEVEL = logging.INFO
    LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    # Formato de timestamp embebido en el nombre de archivo (ordenable)
    TIMESTAMP_FORMAT = '%Y-%m-%d_%Hh%Mm'
    TIMESTAMP_PATTERN = r'\d{4}-\d{2}-\d{2}_\d{2}h\d{2}m'

    # Marcador de espacio en nombres de bases de datos
    SPACE_MARKER = '%'

    # Bases de datos que nunca se respaldan
    ALWAYS_EXCLUDED = ('template0',)

    # Extensión según herramienta de compresión
    COMPRESSION_EXTENSIONS = {
        'gzip': '.gz',
        'pigz': '.gz',
        'bzip2': '.bz2',
        'xz': '.xz',
        'zstd': '.zstd',
    }
    DEFAULT_COMPRESSION_EXTENSION = '.comp'

    DEFAULT_CONFIG = {
        "db_type": "postgresql",
        "host": "localhost",
        "port": None,
        "username": None,
        "password": "",
        "dbnames": "all",
        "dbexclude": [],
        "globals_objects": "postgres_globals",
        "backup_dir": "/var/backups/postgres",
        "create_database": True,
        "doweekly": 6,
        "domonthly": 1,
        "brdaily": 14,
        "brweekly": 5,
        "brmonthly": 12,
        "compression": "gzip",
        "compression_opts": [],
        "encryption": False,
        "encryption_public_key": "",
        "encryption_cipher": "aes256",
        "encryption_suffix": ".enc",
        "pre_backup": "",
        "post_backup": "",
        "ext": "sql",
        "perm": "600",
        "pg_dump_opts": [],
        "command_timeout": 3600,
        "log_dir": "/var/log/autopgbackup",
        "mail_addr": "",
        "mail_from": "",
        "smtp_host": "localhost",
        "smtp_port": 25,
        "schedule": []
    }

    @classmethod
    def load_environment(cls) -> Optional[str]:
        """
        Carga variables de entorno desde el archivo .env más cercano

        Returns:
            Ruta del archivo .env cargado o None
        """
        env_file = find_dotenv(usecwd=True)
        if env_file:
            load_dotenv(env_file)
            return env_file
        return None

    @classmethod
    def config_file(cls) -> Path:
        """Ruta del archivo de configuración (variable de entorno o por defecto)"""
        override = os.getenv(cls.CONFIG_ENV_VAR)
        return Path(override).expanduser() if override else cls.CONFIG_FILE
