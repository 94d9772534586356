"""
Estrategia base para backups (Strategy Pattern)
"""
import os
import shutil
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence
from ..logger import LoggerService
from ..models import BackupConfig


class BackupStrategy(ABC):
    """Interfaz abstracta para los comandos de un motor de BD (Open/Closed Principle)"""

    # Herramientas externas que necesita el motor
    dump_tools: Sequence[str] = ()

    def __init__(self, config: BackupConfig):
        """
        Inicializa la estrategia

        Args:
            config: Configuración de la ejecución
        """
        self.config = config
        self.logger = LoggerService.get_logger(self.__class__.__name__)

    @abstractmethod
    def connection_args(self) -> List[str]:
        """Argumentos de conexión; vacío para la conexión local por defecto"""

    @abstractmethod
    def list_databases_command(self) -> List[str]:
        """Comando que lista las bases de datos del servidor"""

    @abstractmethod
    def parse_database_list(self, output: str) -> List[str]:
        """
        Extrae los nombres de bases de datos de la salida del listado

        Raises:
            DiscoveryError: Si la salida no se puede interpretar
        """

    @abstractmethod
    def database_dump_command(self, database: str) -> List[str]:
        """Comando que vuelca una sola base de datos por stdout"""

    @abstractmethod
    def globals_dump_command(self) -> List[str]:
        """Comando que vuelca los objetos globales del servidor por stdout"""

    def dump_command(self, database: str) -> List[str]:
        """
        Selecciona el comando según el objetivo

        Args:
            database: Nombre real (decodificado) o el pseudo nombre de globales

        Returns:
            Vector de argumentos del comando
        """
        if database == self.config.globals_objects:
            return self.globals_dump_command()
        return self.database_dump_command(database)

    def environment(self) -> Dict[str, str]:
        """Entorno para los procesos del motor"""
        return os.environ.copy()

    def _validate_tools(self, tools: Sequence[str]) -> Optional[str]:
        """
        Valida que las herramientas necesarias estén disponibles

        Args:
            tools: Lista de herramientas requeridas

        Returns:
            None si todo está OK, mensaje de error en caso contrario
        """
        for tool in tools:
            if not shutil.which(tool):
                return f"La herramienta {tool} no está instalada"
        return None

    def validate(self) -> Optional[str]:
        return self._validate_tools(self.dump_tools)
