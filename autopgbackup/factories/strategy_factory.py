"""
Factory para crear estrategias de backup
"""
from typing import Optional
from ..models import BackupConfig
from ..strategies.base_strategy import BackupStrategy
from ..strategies.postgresql_strategy import PostgreSQLBackupStrategy


class BackupStrategyFactory:
    """Factory para crear estrategias de backup (Factory Pattern)"""

    # Mapeo de tipos a estrategias
    _strategies = {
        'postgresql': PostgreSQLBackupStrategy,
        'postgres': PostgreSQLBackupStrategy,
    }

    @classmethod
    def create(cls, config: BackupConfig) -> Optional[BackupStrategy]:
        """
        Crea una estrategia de backup según el tipo de base de datos

        Args:
            config: Configuración de la ejecución (usa config.db_type)

        Returns:
            Instancia de BackupStrategy o None si el tipo no es soportado
        """
        strategy_class = cls._strategies.get(config.db_type.lower())
        if strategy_class:
            return strategy_class(config)
        return None

    @classmethod
    def register_strategy(cls, db_type: str, strategy_class: type):
        """
        Registra una nueva estrategia (permite extender sin modificar - Open/Closed)

        Args:
            db_type: Tipo de base de datos
            strategy_class: Clase de estrategia a registrar
        """
        cls._strategies[db_type.lower()] = strategy_class

    @classmethod
    def get_supported_types(cls) -> list:
        """
        Obtiene lista de tipos de base de datos soportados

        Returns:
            Lista de tipos soportados
        """
        return list(cls._strategies.keys())
