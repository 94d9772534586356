"""
Servicio que compone y ejecuta el pipeline dump -> compresión -> cifrado
"""
import os
import shutil
import subprocess
import tempfile
import time
from pathlib import Path
from typing import List, Tuple
from ..config import Config
from ..errors import DumpError, ToolMissing
from ..logger import LoggerService
from ..models import BackupConfig, BackupResult, PipelineStage, StageResult
from ..strategies.base_strategy import BackupStrategy

ENCRYPTION_TOOL = 'openssl'
PARTIAL_SUFFIX = '.partial'


def compression_extension(tool: str) -> str:
    """Extensión asociada a la herramienta de compresión"""
    return Config.COMPRESSION_EXTENSIONS.get(
        Path(tool).name, Config.DEFAULT_COMPRESSION_EXTENSION
    )


class PipelineService:
    """Servicio que materializa el backup de una base de datos en un archivo"""

    def __init__(self, config: BackupConfig, strategy: BackupStrategy):
        """
        Inicializa el servicio de pipeline

        Args:
            config: Configuración de la ejecución (herramientas ya resueltas)
            strategy: Estrategia del motor de BD
        """
        self.config = config
        self.strategy = strategy
        self.logger = LoggerService.get_logger("PipelineService")

    @staticmethod
    def resolve_tools(config: BackupConfig) -> BackupConfig:
        """
        Deshabilita compresión o cifrado si su herramienta no está disponible

        Se ejecuta una vez al inicio; el resultado vale para toda la ejecución.

        Args:
            config: Configuración original

        Returns:
            Configuración con las etapas no disponibles deshabilitadas
        """
        logger = LoggerService.get_logger("PipelineService")
        changes = {}

        if config.compression and not shutil.which(config.compression):
            logger.warning(f"{ToolMissing(config.compression)}; se desactiva la compresión")
            changes['compression'] = None

        if config.encryption:
            if not shutil.which(ENCRYPTION_TOOL):
                logger.warning(f"{ToolMissing(ENCRYPTION_TOOL)}; se desactiva el cifrado")
                changes['encryption'] = False
            elif not os.access(config.encryption_public_key or '', os.R_OK):
                logger.warning(
                    f"No se puede leer la clave pública '{config.encryption_public_key}'; "
                    "se desactiva el cifrado"
                )
                changes['encryption'] = False

        return config.with_overrides(**changes) if changes else config

    def output_path(self, destination_prefix: Path) -> Path:
        """
        Nombre final: <prefijo>.<ext>[.<comp>][<sufijo cifrado>]

        Args:
            destination_prefix: Ruta sin extensión (directorio/base_timestamp)

        Returns:
            Ruta completa del archivo de backup
        """
        name = f"{Path(destination_prefix).name}.{self.config.ext}"
        if self.config.compression:
            name += compression_extension(self.config.compression)
        if self.config.encryption:
            name += self.config.encryption_suffix
        return Path(destination_prefix).with_name(name)

    def build_stages(self, database: str) -> List[PipelineStage]:
        """
        Construye la cadena de procesos para una base de datos

        Args:
            database: Nombre decodificado o pseudo nombre de globales

        Returns:
            Etapas en orden de flujo de datos
        """
        stages = [PipelineStage('dump', tuple(self.strategy.dump_command(database)))]
        if self.config.compression:
            stages.append(PipelineStage(
                'compress', (self.config.compression, *self.config.compression_opts)
            ))
        if self.config.encryption:
            stages.append(PipelineStage('encrypt', self.encryption_command()))
        return stages

    def encryption_command(self) -> Tuple[str, ...]:
        """Cifrado S/MIME con la clave pública configurada"""
        return (
            ENCRYPTION_TOOL, 'smime', '-encrypt',
            f'-{self.config.encryption_cipher}',
            '-binary', '-outform', 'DEM',
            self.config.encryption_public_key,
        )

    @staticmethod
    def partial_path(output_file: Path) -> Path:
        """Archivo oculto donde escribe el pipeline hasta que el dump se valida"""
        return output_file.with_name(f".{output_file.name}{PARTIAL_SUFFIX}")

    def dump(self, database: str, destination_prefix: Path) -> Path:
        """
        Vuelca la base de datos al archivo de destino

        Args:
            database: Nombre decodificado o pseudo nombre de globales
            destination_prefix: Ruta sin extensión

        Returns:
            Ruta del archivo de backup escrito

        Raises:
            DumpError: Si alguna etapa falla o el archivo falta o está vacío
        """
        output_file = self.output_path(destination_prefix)
        partial_file = self.partial_path(output_file)
        stages = self.build_stages(database)
        for stage in stages:
            self.logger.debug(f"Etapa {stage}")

        # Restos de una ejecución interrumpida
        self._discard(partial_file)
        try:
            results = self._run_pipeline(stages, partial_file, output_file)
            self._check_stages(results, output_file)
            self._check_output(partial_file, output_file)
            os.replace(partial_file, output_file)
        except (DumpError, OSError):
            self._discard(partial_file)
            raise

        return output_file

    def execute_dump(self, database: str, destination_prefix: Path) -> BackupResult:
        """
        Template method para ejecutar el dump con medición de tiempo

        Args:
            database: Nombre decodificado o pseudo nombre de globales
            destination_prefix: Ruta sin extensión

        Returns:
            Resultado del backup
        """
        self.logger.info(f"Iniciando backup de {database}...")
        start_time = time.time()

        try:
            output_file = self.dump(database, destination_prefix)
        except DumpError as e:
            duration = time.time() - start_time
            self.logger.error(f"Backup fallido de {database}: {e}")
            return BackupResult(
                database_name=database,
                success=False,
                error=str(e),
                duration_seconds=duration
            )
        except OSError as e:
            duration = time.time() - start_time
            self.logger.error(f"Error al ejecutar backup de {database}: {e}")
            return BackupResult(
                database_name=database,
                success=False,
                error=str(e),
                duration_seconds=duration
            )

        duration = time.time() - start_time
        file_size = output_file.stat().st_size / (1024 * 1024)  # MB
        self.logger.info(
            f"Backup exitoso: {output_file.name} "
            f"({file_size:.2f} MB, {duration:.2f}s)"
        )
        return BackupResult(
            database_name=database,
            success=True,
            output_file=str(output_file),
            duration_seconds=duration
        )

    def _run_pipeline(self, stages: List[PipelineStage], partial_file: Path,
                      output_file: Path) -> List[StageResult]:
        """
        Ejecuta las etapas conectadas por pipes, escribiendo la última en el archivo

        Todas las etapas corren a la vez; la memoria queda acotada por los
        buffers de los pipes. El archivo parcial se crea con los permisos
        finales antes de recibir datos.

        Args:
            stages: Etapas en orden de flujo de datos
            partial_file: Archivo temporal que recibe la salida
            output_file: Nombre final (para los mensajes de error)

        Returns:
            Estado de salida de cada etapa

        Raises:
            DumpError: Si una etapa no arranca o se supera el timeout
            OSError: Si no se puede crear el archivo parcial
        """
        processes = []
        error_files = []
        fd = os.open(partial_file, os.O_WRONLY | os.O_CREAT | os.O_EXCL, self.config.perm)
        try:
            os.fchmod(fd, self.config.perm)
        except OSError:
            os.close(fd)
            raise
        try:
            with os.fdopen(fd, 'wb') as out:
                upstream = None
                for index, stage in enumerate(stages):
                    is_last = index == len(stages) - 1
                    err = tempfile.TemporaryFile()
                    error_files.append(err)
                    try:
                        proc = subprocess.Popen(
                            stage.command,
                            stdin=upstream if upstream is not None else subprocess.DEVNULL,
                            stdout=out if is_last else subprocess.PIPE,
                            stderr=err,
                            env=self.strategy.environment() if stage.name == 'dump' else None
                        )
                    except OSError as e:
                        self._kill(processes)
                        raise DumpError(
                            DumpError.STAGE_FAILED, output_file, stage=stage.name, detail=str(e)
                        )
                    finally:
                        # El proceso anterior recibe SIGPIPE si el siguiente termina
                        if upstream is not None:
                            upstream.close()
                    upstream = proc.stdout
                    processes.append(proc)

                deadline = time.monotonic() + self.config.command_timeout
                for proc in processes:
                    try:
                        proc.wait(timeout=max(0, deadline - time.monotonic()))
                    except subprocess.TimeoutExpired:
                        self._kill(processes)
                        raise DumpError(
                            DumpError.TIMEOUT, output_file,
                            detail=f"más de {self.config.command_timeout:.0f}s"
                        )

            results = []
            for stage, proc, err in zip(stages, processes, error_files):
                err.seek(0)
                stderr = err.read().decode('utf-8', errors='replace').strip()
                results.append(StageResult(stage.name, proc.returncode, stderr))
            return results
        finally:
            for err in error_files:
                err.close()

    @staticmethod
    def _kill(processes):
        for proc in processes:
            if proc.poll() is None:
                proc.kill()
        for proc in processes:
            proc.wait()

    @staticmethod
    def _check_stages(results: List[StageResult], output_file: Path):
        """
        Falla con la etapa culpable

        Se informa la etapa fallida más cercana al archivo: una etapa que
        termina antes de tiempo rompe el pipe de las anteriores.
        """
        failed = [r for r in results if not r.success]
        if not failed:
            return
        culprit = failed[-1]
        raise DumpError(
            DumpError.STAGE_FAILED, output_file, stage=culprit.name,
            detail=f"código {culprit.returncode}: {culprit.stderr}".strip()
        )

    @staticmethod
    def _check_output(partial_file: Path, output_file: Path):
        if not partial_file.exists():
            raise DumpError(DumpError.MISSING, output_file)
        if partial_file.stat().st_size == 0:
            raise DumpError(DumpError.EMPTY, output_file)

    def _discard(self, partial_file: Path):
        """Elimina un artefacto parcial (nunca un backup terminado)"""
        try:
            if partial_file.exists():
                partial_file.unlink()
        except OSError as e:
            self.logger.warning(f"No se pudo eliminar el archivo parcial {partial_file}: {e}")
