"""
Servicio de logging siguiendo principio Single Responsibility
"""
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional
from .config import Config


class RunRecorder(logging.Handler):
    """Guarda las entradas de una ejecución para el reporte y el código de salida"""

    def __init__(self, level=logging.INFO):
        super().__init__(level)
        self.setFormatter(logging.Formatter(Config.LOG_FORMAT))
        self.lines: List[str] = []
        self.problems: List[str] = []
        self.has_errors = False
        self.has_warnings = False

    def emit(self, record: logging.LogRecord):
        try:
            line = self.format(record)
        except Exception:
            self.handleError(record)
            return
        self.lines.append(line)
        if record.levelno >= logging.ERROR:
            self.has_errors = True
            self.problems.append(line)
        elif record.levelno >= logging.WARNING:
            self.has_warnings = True
            self.problems.append(line)

    @property
    def full_log(self) -> str:
        return "\n".join(self.lines)


class LoggerService:
    """Servicio centralizado de logging"""

    ROOT_NAME = "autopgbackup"

    _loggers = {}

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """
        Obtiene o crea un logger con el nombre especificado

        Los loggers cuelgan de un logger raíz común; los sinks (archivo,
        consola, grabador de ejecución) se instalan una sola vez en la raíz.

        Args:
            name: Nombre del logger

        Returns:
            Logger configurado
        """
        if name in cls._loggers:
            return cls._loggers[name]

        logger = logging.getLogger(f"{cls.ROOT_NAME}.{name}")
        cls._loggers[name] = logger
        return logger

    @classmethod
    def configure(cls, log_dir: Optional[Path] = None, debug: bool = False) -> logging.Logger:
        """
        Configura los sinks de logging

        Args:
            log_dir: Directorio del archivo de log (None = sin archivo)
            debug: Si es True, replica el log en consola con nivel DEBUG

        Returns:
            Logger raíz de la aplicación
        """
        root = logging.getLogger(cls.ROOT_NAME)
        for handler in list(root.handlers):
            if not isinstance(handler, RunRecorder):
                root.removeHandler(handler)
                handler.close()

        root.setLevel(logging.DEBUG if debug else Config.LOG_LEVEL)
        root.propagate = False
        formatter = logging.Formatter(Config.LOG_FORMAT)

        # Handler para archivo
        if log_dir is not None:
            log_dir = Path(log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)
            log_file = log_dir / f"{cls.ROOT_NAME}_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(Config.LOG_LEVEL)
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)

        # Handler para consola (solo en modo debug)
        if debug:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(logging.DEBUG)
            console_handler.setFormatter(formatter)
            root.addHandler(console_handler)

        return root

    @classmethod
    def start_recording(cls) -> RunRecorder:
        """Instala un grabador nuevo para la ejecución actual"""
        cls.stop_recording()
        recorder = RunRecorder()
        root = logging.getLogger(cls.ROOT_NAME)
        if root.level == logging.NOTSET:
            root.setLevel(Config.LOG_LEVEL)
        root.addHandler(recorder)
        return recorder

    @classmethod
    def stop_recording(cls):
        root = logging.getLogger(cls.ROOT_NAME)
        for handler in list(root.handlers):
            if isinstance(handler, RunRecorder):
                root.removeHandler(handler)
