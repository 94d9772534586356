"""
Ejecución de los comandos previos y posteriores al backup
"""
import shlex
import subprocess
from ..logger import LoggerService


class HookService:
    """Ejecuta comandos del operador sin shell y registra su salida"""

    def __init__(self, timeout: float):
        self.timeout = timeout
        self.logger = LoggerService.get_logger("HookService")

    def run(self, label: str, command: str) -> bool:
        """
        Ejecuta un hook

        Args:
            label: Nombre para el log (pre_backup, post_backup)
            command: Línea de comando; vacía = no hacer nada

        Returns:
            True si no había hook o terminó con código 0
        """
        if not command or not command.strip():
            return True

        self.logger.info(f"Ejecutando {label}: {command}")
        try:
            result = subprocess.run(
                shlex.split(command),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            self.logger.warning(f"Timeout en {label}: más de {self.timeout:.0f}s")
            return False
        except (OSError, ValueError) as e:
            self.logger.warning(f"No se pudo ejecutar {label}: {e}")
            return False

        for line in result.stdout.splitlines():
            self.logger.info(f"[{label}] {line}")

        if result.returncode != 0:
            self.logger.warning(f"{label} terminó con código {result.returncode}")
            return False
        return True
