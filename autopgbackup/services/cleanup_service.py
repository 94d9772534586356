"""
Servicio para rotar backups antiguos (Single Responsibility)
"""
import glob
import re
from pathlib import Path
from typing import List, Tuple
from ..config import Config
from ..errors import RotationWarning
from ..logger import LoggerService
from ..models import BackupPeriod


class CleanupService:
    """Servicio que conserva los N backups más recientes por base de datos y periodo"""

    def __init__(self):
        """Inicializa el servicio de limpieza"""
        self.logger = LoggerService.get_logger("CleanupService")

    def list_backups(self, directory: Path, database: str) -> List[Tuple[str, Path]]:
        """
        Lista los backups de una base de datos ordenados del más nuevo al más antiguo

        El orden lo da el timestamp embebido en el nombre, nunca el mtime.

        Args:
            directory: Directorio <raíz>/<periodo>/<base de datos>
            database: Nombre de la base de datos (prefijo de los archivos)

        Returns:
            Lista de tuplas (timestamp, ruta)
        """
        if not directory.is_dir():
            return []

        pattern = re.compile(
            rf'^{re.escape(database)}_({Config.TIMESTAMP_PATTERN})(\.|$)'
        )
        backups = []
        for backup_file in directory.glob(f"{glob.escape(database)}_*"):
            match = pattern.match(backup_file.name)
            if not match or not backup_file.is_file():
                self.logger.debug(f"Ignorando archivo sin timestamp: {backup_file.name}")
                continue
            backups.append((match.group(1), backup_file))

        backups.sort(key=lambda item: (item[0], item[1].name), reverse=True)
        return backups

    def rotate(self, root: Path, database: str, period: BackupPeriod, keep_count: int) -> List[Path]:
        """
        Elimina todos los backups salvo los keep_count más recientes

        Args:
            root: Directorio raíz de backups
            database: Nombre de la base de datos (decodificado)
            period: Periodo a rotar
            keep_count: Cantidad de archivos a conservar

        Returns:
            Rutas eliminadas
        """
        directory = Path(root) / str(period) / database
        backups = self.list_backups(directory, database)
        outdated = backups[max(keep_count, 0):]

        deleted = []
        for _, backup_file in outdated:
            try:
                backup_file.unlink()
            except OSError as e:
                warning = RotationWarning(f"Error al eliminar {backup_file}: {e}")
                self.logger.warning(str(warning))
                continue
            deleted.append(backup_file)
            self.logger.info(f"Eliminado backup antiguo: {backup_file}")

        if deleted:
            self.logger.info(
                f"Rotación de {period}/{database}: {len(deleted)} archivo(s) eliminado(s), "
                f"{len(backups) - len(deleted)} conservado(s)"
            )
        else:
            self.logger.debug(f"No hay backups antiguos para eliminar en {directory}")

        return deleted

    def get_backup_stats(self, backup_dir: Path) -> dict:
        """
        Obtiene estadísticas de los backups de un directorio (recursivo)

        Args:
            backup_dir: Directorio de backups

        Returns:
            Diccionario con estadísticas
        """
        stats = {
            'total_files': 0,
            'total_size_mb': 0,
            'oldest_backup': None,
            'newest_backup': None,
        }
        if not backup_dir.exists():
            return stats

        pattern = re.compile(rf'_({Config.TIMESTAMP_PATTERN})(\.|$)')
        files = []
        for backup_file in backup_dir.rglob('*'):
            match = pattern.search(backup_file.name)
            if match and backup_file.is_file():
                files.append((match.group(1), backup_file))

        if not files:
            return stats

        try:
            total_size = sum(f.stat().st_size for _, f in files)
        except OSError as e:
            self.logger.warning(f"Error obteniendo estadísticas: {e}")
            return stats

        timestamps = sorted(ts for ts, _ in files)
        stats.update({
            'total_files': len(files),
            'total_size_mb': total_size / (1024 * 1024),
            'oldest_backup': timestamps[0],
            'newest_backup': timestamps[-1],
        })
        return stats

