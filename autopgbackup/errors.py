"""
Errores del sistema de backup
"""
from typing import Optional


class BackupError(Exception):
    """Error base del sistema de backup"""


class DiscoveryError(BackupError):
    """La consulta de bases de datos falló o devolvió datos inválidos"""


class DumpError(BackupError):
    """El pipeline no produjo un archivo de backup válido"""

    MISSING = 'missing'
    EMPTY = 'empty'
    STAGE_FAILED = 'stage-failed'
    TIMEOUT = 'timeout'

    def __init__(self, reason: str, path=None, stage: Optional[str] = None, detail: str = ''):
        self.reason = reason
        self.path = path
        self.stage = stage
        self.detail = detail
        message = f"{reason}"
        if stage:
            message += f" (etapa: {stage})"
        if path:
            message += f": {path}"
        if detail:
            message += f" - {detail}"
        super().__init__(message)


class RotationWarning(BackupError):
    """No se pudo eliminar un backup antiguo"""


class ToolMissing(BackupError):
    """Herramienta externa no encontrada en el PATH"""

    def __init__(self, tool: str):
        self.tool = tool
        super().__init__(f"La herramienta {tool} no está instalada")
