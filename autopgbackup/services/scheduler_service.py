"""
Servicio de programación de tareas de backup
"""
import schedule
import time
import signal
from typing import Callable, Sequence
from ..logger import LoggerService


class SchedulerService:
    """Servicio para programar y ejecutar backups automáticos"""

    def __init__(self, job: Callable[[], int], schedules: Sequence[str]):
        """
        Inicializa el servicio de programación

        Args:
            job: Ejecución completa de backup; devuelve el código de salida
            schedules: Horas de ejecución diaria (HH:MM)
        """
        self.job = job
        self.schedules = list(schedules)
        self.logger = LoggerService.get_logger("SchedulerService")
        self.running = False
        self.scheduler = schedule.Scheduler()

    def start(self, poll_seconds: int = 60):
        """
        Inicia el programador de tareas y bloquea hasta recibir una señal

        Args:
            poll_seconds: Intervalo de revisión de tareas pendientes
        """
        for schedule_time in self.schedules:
            self.scheduler.every().day.at(schedule_time).do(self._run_job)

        # Registrar manejadores de señales para shutdown graceful
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        self.logger.info("=" * 70)
        self.logger.info("SERVICIO DE BACKUP AUTOMÁTICO INICIADO")
        self.logger.info("=" * 70)
        self.logger.info(f"Backups programados: {len(self.schedules)}")
        for schedule_time in self.schedules:
            self.logger.info(f"  - A las {schedule_time}")
        self.logger.info(f"Próxima ejecución: {self.get_next_run()}")

        # Loop principal
        self.running = True
        while self.running:
            self.scheduler.run_pending()
            time.sleep(poll_seconds)

    def _run_job(self):
        """Ejecuta el trabajo de backup"""
        self.logger.info(f"Ejecutando backup programado a las {time.strftime('%Y-%m-%d %H:%M:%S')}")
        exit_code = self.job()
        if exit_code:
            self.logger.warning("Backup programado completado con errores")
        self.logger.info(f"Próxima ejecución: {self.get_next_run()}")

    def _signal_handler(self, signum, frame):
        """
        Manejador de señales para shutdown graceful

        Args:
            signum: Número de señal
            frame: Frame actual
        """
        self.logger.info(f"Señal recibida: {signal.Signals(signum).name}")
        self.stop()

    def stop(self):
        """Detiene el servicio de forma ordenada"""
        self.logger.info("Deteniendo servicio de backup...")
        self.running = False
        self.scheduler.clear()

    def get_next_run(self) -> str:
        """
        Obtiene la fecha de la próxima ejecución

        Returns:
            String con la próxima ejecución
        """
        next_run = self.scheduler.next_run
        if next_run:
            return next_run.strftime('%Y-%m-%d %H:%M:%S')
        return "No hay ejecuciones programadas"
