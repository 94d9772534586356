"""
Modelos de datos del sistema
"""
import re
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .config import Config


class BackupPeriod(str, Enum):
    """Periodo de backup: determina el directorio y la retención"""
    DAILY = 'daily'
    WEEKLY = 'weekly'
    MONTHLY = 'monthly'

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class RetentionPolicy:
    """Cantidad de archivos a conservar por periodo"""
    daily: int = 14
    weekly: int = 5
    monthly: int = 12

    def keep_for(self, period: BackupPeriod) -> int:
        return {
            BackupPeriod.DAILY: self.daily,
            BackupPeriod.WEEKLY: self.weekly,
            BackupPeriod.MONTHLY: self.monthly,
        }[period]

    def is_enabled(self, period: BackupPeriod) -> bool:
        """Un periodo con retención <= 0 queda deshabilitado"""
        return self.keep_for(period) > 0


@dataclass(frozen=True)
class BackupConfig:
    """Configuración inmutable de una ejecución"""
    backup_dir: Path
    db_type: str = 'postgresql'
    host: Optional[str] = 'localhost'
    port: Optional[int] = None
    username: Optional[str] = None
    password: str = ''
    dbnames: Optional[Tuple[str, ...]] = None  # None = todas
    dbexclude: Tuple[str, ...] = ()
    globals_objects: str = 'postgres_globals'
    create_database: bool = True
    doweekly: int = 6
    domonthly: int = 1
    retention: RetentionPolicy = field(default_factory=RetentionPolicy)
    compression: Optional[str] = 'gzip'
    compression_opts: Tuple[str, ...] = ()
    encryption: bool = False
    encryption_public_key: str = ''
    encryption_cipher: str = 'aes256'
    encryption_suffix: str = '.enc'
    pre_backup: str = ''
    post_backup: str = ''
    ext: str = 'sql'
    perm: int = 0o600
    pg_dump_opts: Tuple[str, ...] = ()
    command_timeout: float = 3600
    log_dir: Optional[Path] = None
    mail_addr: str = ''
    mail_from: str = ''
    smtp_host: str = 'localhost'
    smtp_port: int = 25
    schedule: Tuple[str, ...] = ()

    def __post_init__(self):
        """Validación después de inicialización"""
        if not self.db_type:
            raise ValueError("El tipo de base de datos es obligatorio")
        if not self.globals_objects:
            raise ValueError("globals_objects no puede estar vacío")
        if not 0 <= self.doweekly <= 7:
            raise ValueError("doweekly debe estar entre 0 y 7")
        if not 0 <= self.domonthly <= 31:
            raise ValueError("domonthly debe estar entre 0 y 31")
        if not 0 <= self.perm <= 0o7777:
            raise ValueError("perm debe ser un modo octal válido")
        if self.command_timeout <= 0:
            raise ValueError("command_timeout debe ser mayor a 0")
        for schedule_time in self.schedule:
            if not self._validate_time_format(schedule_time):
                raise ValueError(f"El formato de schedule debe ser HH:MM: {schedule_time}")

    @staticmethod
    def _validate_time_format(time_str: str) -> bool:
        """Valida formato de hora HH:MM"""
        if not re.fullmatch(r'\d{2}:\d{2}', time_str or ''):
            return False
        hours, minutes = int(time_str[:2]), int(time_str[3:])
        return 0 <= hours <= 23 and 0 <= minutes <= 59

    @property
    def is_local_default(self) -> bool:
        """True si se usa la conexión local por defecto (socket, sin credenciales)"""
        return (self.host in (None, '', 'localhost')
                and self.port is None and not self.username)

    def with_overrides(self, **changes) -> 'BackupConfig':
        """Devuelve una copia con cambios (p. ej. herramientas deshabilitadas)"""
        return replace(self, **changes)


@dataclass(frozen=True)
class PipelineStage:
    """Etapa del pipeline: un proceso externo con sus argumentos"""
    name: str
    command: Tuple[str, ...]

    def __str__(self):
        return f"{self.name}: {' '.join(self.command)}"


@dataclass
class StageResult:
    """Estado de salida de una etapa del pipeline"""
    name: str
    returncode: Optional[int]
    stderr: str = ''

    @property
    def success(self) -> bool:
        return self.returncode == 0


@dataclass
class BackupResult:
    """Resultado de una operación de backup"""
    database_name: str
    success: bool
    output_file: Optional[str] = None
    error: Optional[str] = None
    duration_seconds: float = 0.0

    def __str__(self):
        if self.success:
            return f"✓ {self.database_name}: {self.output_file} ({self.duration_seconds:.2f}s)"
        else:
            return f"✗ {self.database_name}: {self.error}"


@dataclass
class RunSummary:
    """Resultado de una ejecución completa"""
    period: BackupPeriod
    keep_count: int
    results: List[BackupResult] = field(default_factory=list)
    deleted: Dict[str, List[Path]] = field(default_factory=dict)

    @property
    def failed(self) -> List[BackupResult]:
        return [r for r in self.results if not r.success]

    @property
    def deleted_count(self) -> int:
        return sum(len(paths) for paths in self.deleted.values())


def backup_timestamp(moment) -> str:
    """Timestamp de ancho fijo, ordenable lexicográficamente"""
    return moment.strftime(Config.TIMESTAMP_FORMAT)


def decode_database_name(name: str) -> str:
    """Convierte el marcador de espacio en un espacio literal"""
    return name.replace(Config.SPACE_MARKER, ' ')


def encode_database_name(name: str) -> str:
    return name.replace(' ', Config.SPACE_MARKER)
