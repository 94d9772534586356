#!/usr/bin/env python3
"""
Backup periódico de PostgreSQL con rotación diaria, semanal y mensual
Punto de entrada principal

Uso:
    python main.py              # Ejecutar backup (o servicio si hay 'schedule')
    python main.py --debug      # Igual, replicando el log en consola
    python main.py --help       # Ayuda

La configuración se lee de config.json (o de $AUTOPGBACKUP_CONFIG).
"""
import sys
import argparse
from typing import Optional

from autopgbackup.config import Config
from autopgbackup.errors import BackupError
from autopgbackup.logger import LoggerService, RunRecorder
from autopgbackup.models import BackupConfig
from autopgbackup.repositories.config_repository import ConfigRepository
from autopgbackup.services.backup_service import BackupService
from autopgbackup.services.report_service import ReportService
from autopgbackup.services.scheduler_service import SchedulerService


class ArgumentParser(argparse.ArgumentParser):
    """Parser que termina con código 1 ante errores de uso"""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def parse_arguments(argv=None):
    """
    Parsea argumentos de línea de comandos

    Returns:
        Namespace con los argumentos parseados
    """
    parser = ArgumentParser(
        prog='autopgbackup',
        description='Backup periódico de PostgreSQL con rotación por periodo',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Configuración:
  {Config.CONFIG_FILE} o la ruta indicada en ${Config.CONFIG_ENV_VAR}.
  Las credenciales pueden referenciar variables de entorno (${{VAR}})
  definidas en un archivo .env.
        """
    )

    parser.add_argument(
        '-d', '--debug',
        action='store_true',
        help='Mostrar el log en consola (sin envío de reporte por correo)'
    )

    return parser.parse_args(argv)


def run_backup(config: BackupConfig, debug: bool, recorder: Optional[RunRecorder] = None) -> int:
    """
    Ejecuta una pasada de backup, envía el reporte y calcula el código de salida

    Args:
        config: Configuración de la ejecución
        debug: Modo debug
        recorder: Grabador ya iniciado (si no, se crea uno)

    Returns:
        0 si no hubo entradas de error, 1 en caso contrario
    """
    logger = LoggerService.get_logger("Main")
    recorder = recorder or LoggerService.start_recording()
    period = None

    try:
        service = BackupService(config)
        summary = service.run()
        period = summary.period
    except (BackupError, OSError, ValueError) as e:
        logger.error(f"Ejecución abortada: {e}")
    finally:
        LoggerService.stop_recording()

    ReportService(config).send(recorder, period, debug=debug)
    return 1 if recorder.has_errors else 0


def run_scheduled_backup(config: BackupConfig, debug: bool) -> int:
    """
    Ejecución programada: reabre el log del día antes de cada pasada

    Args:
        config: Configuración de la ejecución
        debug: Modo debug

    Returns:
        Código de salida de la pasada
    """
    try:
        LoggerService.configure(log_dir=config.log_dir, debug=debug)
    except OSError as e:
        print(f"Error: no se pudo abrir el log en {config.log_dir}: {e}", file=sys.stderr)
        return 1
    return run_backup(config, debug)


def main(argv=None) -> int:
    """Función principal"""
    args = parse_arguments(argv)

    Config.load_environment()
    LoggerService.configure(log_dir=None, debug=args.debug)
    recorder = LoggerService.start_recording()

    try:
        config = ConfigRepository().get_backup_config()
    except (ValueError, TypeError, KeyError) as e:
        LoggerService.stop_recording()
        print(f"Error: configuración inválida: {e}", file=sys.stderr)
        return 1

    try:
        LoggerService.configure(log_dir=config.log_dir, debug=args.debug)
    except OSError as e:
        LoggerService.stop_recording()
        print(f"Error: no se pudo abrir el log en {config.log_dir}: {e}", file=sys.stderr)
        return 1

    if config.schedule:
        LoggerService.stop_recording()
        scheduler = SchedulerService(
            lambda: run_scheduled_backup(config, args.debug), config.schedule
        )
        scheduler.start()
        return 0

    return run_backup(config, args.debug, recorder)


def run():
    """Entrada del script de consola"""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nPrograma interrumpido por el usuario")
        sys.exit(1)


if __name__ == "__main__":
    run()
