"""
Servicio principal que orquesta los backups
"""
from datetime import datetime
from pathlib import Path
from typing import List, Optional
from ..factories.strategy_factory import BackupStrategyFactory
from ..logger import LoggerService
from ..models import (
    BackupConfig, BackupPeriod, BackupResult, RunSummary,
    backup_timestamp, decode_database_name,
)
from ..strategies.base_strategy import BackupStrategy
from .cleanup_service import CleanupService
from .discovery_service import DiscoveryService
from .hook_service import HookService
from .period_service import PeriodService
from .pipeline_service import PipelineService


class BackupService:
    """Servicio principal que orquesta los backups"""

    def __init__(self, config: BackupConfig, strategy: Optional[BackupStrategy] = None):
        """
        Inicializa el servicio de backup

        Las herramientas de compresión y cifrado se resuelven aquí, una sola
        vez; las que faltan quedan deshabilitadas para toda la ejecución.

        Args:
            config: Configuración inmutable de la ejecución
            strategy: Estrategia del motor (por defecto según config.db_type)

        Raises:
            ValueError: Si el tipo de base de datos no está soportado
        """
        self.logger = LoggerService.get_logger("BackupService")

        if strategy is None:
            strategy = BackupStrategyFactory.create(config)
        if strategy is None:
            supported = ", ".join(BackupStrategyFactory.get_supported_types())
            raise ValueError(
                f"Tipo de base de datos no soportado: {config.db_type} (soportados: {supported})"
            )

        missing = strategy.validate()
        if missing:
            self.logger.warning(missing)

        self.config = PipelineService.resolve_tools(config)
        strategy.config = self.config
        self.strategy = strategy

        self.period_service = PeriodService(self.config)
        self.discovery_service = DiscoveryService(self.config, strategy)
        self.pipeline_service = PipelineService(self.config, strategy)
        self.cleanup_service = CleanupService()
        self.hook_service = HookService(self.config.command_timeout)

    def ensure_directories(self):
        """Crea los directorios de periodo si no existen (idempotente)"""
        for period in BackupPeriod:
            (self.config.backup_dir / str(period)).mkdir(parents=True, exist_ok=True)

    def run(self, now: Optional[datetime] = None) -> RunSummary:
        """
        Ejecuta una pasada completa de backup

        Args:
            now: Momento de la ejecución (por defecto, ahora)

        Returns:
            Resumen de la ejecución

        Raises:
            DiscoveryError: Si no se pudo obtener la lista de bases de datos
            OSError: Si no se pueden crear los directorios de periodo
        """
        now = now or datetime.now()
        period, keep_count = self.period_service.classify(now.date())
        summary = RunSummary(period=period, keep_count=keep_count)

        self.logger.info("=" * 70)
        self.logger.info(f"INICIANDO PROCESO DE BACKUP {str(period).upper()} (conservar {keep_count})")
        self.logger.info("=" * 70)

        self.ensure_directories()
        if keep_count <= 0:
            self.logger.info(f"Backups {period} deshabilitados (retención {keep_count}); nada que hacer")
            return summary

        self.hook_service.run('pre_backup', self.config.pre_backup)
        try:
            databases = self.discovery_service.get_databases()
            timestamp = backup_timestamp(now)
            for database in databases:
                self.logger.info("-" * 70)
                result = self.backup_database(database, period, keep_count, timestamp, summary)
                summary.results.append(result)
        finally:
            self.hook_service.run('post_backup', self.config.post_backup)

        self._print_summary(summary)
        return summary

    def backup_database(self, database: str, period: BackupPeriod, keep_count: int,
                        timestamp: str, summary: Optional[RunSummary] = None) -> BackupResult:
        """
        Directorio, rotación y dump de una base de datos

        La rotación corre antes del dump para que el archivo nuevo nunca
        cuente en la retención de la misma pasada.

        Args:
            database: Nombre codificado
            period: Periodo activo
            keep_count: Archivos a conservar
            timestamp: Timestamp de la ejecución
            summary: Resumen donde registrar los archivos eliminados

        Returns:
            Resultado del backup
        """
        name = decode_database_name(database)
        directory = self.config.backup_dir / str(period) / name
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self.logger.error(f"No se pudo crear el directorio {directory}: {e}")
            return BackupResult(database_name=name, success=False, error=str(e))

        deleted = self.cleanup_service.rotate(self.config.backup_dir, name, period, keep_count)
        if summary is not None and deleted:
            summary.deleted[name] = deleted

        return self.pipeline_service.execute_dump(name, directory / f"{name}_{timestamp}")

    def _print_summary(self, summary: RunSummary):
        """
        Imprime resumen de la operación de backup

        Args:
            summary: Resumen de la ejecución
        """
        results: List[BackupResult] = summary.results
        failed_count = len(summary.failed)
        success_count = len(results) - failed_count
        total_time = sum(r.duration_seconds for r in results)

        self.logger.info("=" * 70)
        self.logger.info(f"RESUMEN DEL PROCESO DE BACKUP {str(summary.period).upper()}")
        self.logger.info("=" * 70)

        for result in results:
            status = "✓ EXITOSO" if result.success else "✗ FALLIDO"
            self.logger.info(f"{status}: {result.database_name} ({result.duration_seconds:.2f}s)")
            if result.success and result.output_file:
                file_path = Path(result.output_file)
                try:
                    size_mb = file_path.stat().st_size / (1024 * 1024)
                    self.logger.info(f"  Archivo: {file_path.name} ({size_mb:.2f} MB)")
                except OSError as e:
                    self.logger.debug(f"No se pudo obtener tamaño del archivo: {e}")

        self.logger.info("-" * 70)
        self.logger.info(f"Total de bases de datos procesadas: {len(results)}")
        self.logger.info(f"Backups exitosos: {success_count}")
        self.logger.info(f"Backups fallidos: {failed_count}")
        self.logger.info(f"Tiempo total: {total_time:.2f}s")
        self.logger.info(f"Backups antiguos eliminados: {summary.deleted_count}")

        stats = self.cleanup_service.get_backup_stats(self.config.backup_dir / str(summary.period))
        self.logger.info(f"Backups {summary.period} almacenados: {stats['total_files']} archivo(s)")
        self.logger.info(f"Espacio utilizado: {stats['total_size_mb']:.2f} MB")
        self.logger.info("=" * 70)

        if failed_count > 0:
            self.logger.error(
                f"ATENCIÓN: {failed_count} backup(s) fallaron: "
                + ", ".join(r.database_name for r in summary.failed)
            )
