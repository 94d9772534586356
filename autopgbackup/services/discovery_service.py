"""
Servicio de descubrimiento de bases de datos
"""
import subprocess
from typing import Iterable, List
from ..config import Config
from ..errors import DiscoveryError
from ..logger import LoggerService
from ..models import BackupConfig, encode_database_name
from ..strategies.base_strategy import BackupStrategy


def filter_databases(discovered: Iterable[str], exclude: Iterable[str], globals_name: str) -> List[str]:
    """
    Aplica exclusiones y agrega el pseudo nombre de globales

    Args:
        discovered: Nombres encontrados en el servidor
        exclude: Nombres a excluir (puede tener duplicados)
        globals_name: Pseudo nombre de los objetos globales

    Returns:
        Nombres ordenados alfabéticamente, con globales al final
    """
    excluded = {encode_database_name(name) for name in exclude}
    excluded.update(Config.ALWAYS_EXCLUDED)
    names = sorted({encode_database_name(name) for name in discovered} - excluded - {globals_name})
    names.append(globals_name)
    return names


class DiscoveryService:
    """Servicio que obtiene el conjunto de bases de datos a respaldar"""

    def __init__(self, config: BackupConfig, strategy: BackupStrategy):
        """
        Inicializa el servicio de descubrimiento

        Args:
            config: Configuración de la ejecución
            strategy: Estrategia del motor de BD
        """
        self.config = config
        self.strategy = strategy
        self.logger = LoggerService.get_logger("DiscoveryService")

    def get_databases(self) -> List[str]:
        """
        Lista fija de la configuración o descubrimiento en el servidor

        Returns:
            Nombres codificados a respaldar

        Raises:
            DiscoveryError: Si la consulta al servidor falla
        """
        if self.config.dbnames is None:
            return self.list_databases()

        names = []
        for name in self.config.dbnames:
            name = encode_database_name(name)
            if name not in names and name != self.config.globals_objects:
                names.append(name)
        names.append(self.config.globals_objects)
        self.logger.debug(f"Usando lista fija de bases de datos: {', '.join(names)}")
        return names

    def list_databases(self) -> List[str]:
        """
        Consulta el servidor y aplica las exclusiones

        Returns:
            Nombres codificados a respaldar

        Raises:
            DiscoveryError: Si el proceso falla o la salida no es válida
        """
        cmd = self.strategy.list_databases_command()
        self.logger.debug(f"Descubriendo bases de datos: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                env=self.strategy.environment(),
                timeout=self.config.command_timeout
            )
        except subprocess.TimeoutExpired:
            raise DiscoveryError(
                f"Timeout: el listado tardó más de {self.config.command_timeout:.0f}s"
            )
        except OSError as e:
            raise DiscoveryError(f"No se pudo ejecutar {cmd[0]}: {e}")

        if result.returncode != 0:
            raise DiscoveryError(
                f"{cmd[0]} terminó con código {result.returncode}: {result.stderr.strip()}"
            )

        discovered = self.strategy.parse_database_list(result.stdout)
        names = filter_databases(discovered, self.config.dbexclude, self.config.globals_objects)
        self.logger.info(f"Bases de datos a respaldar: {', '.join(names)}")
        return names
