"""
Clasificación del periodo de backup según la fecha
"""
from datetime import date
from typing import Tuple
from ..models import BackupConfig, BackupPeriod, RetentionPolicy


def classify_period(day_of_month: int, day_of_week: int, monthly_day: int,
                    weekly_day: int, retention: RetentionPolicy) -> Tuple[BackupPeriod, int]:
    """
    Decide el periodo activo (mensual > semanal > diario)

    Un día configurado en 0 o una retención <= 0 deshabilitan el periodo.

    Args:
        day_of_month: Día del mes (1-31)
        day_of_week: Día ISO de la semana (1=lunes .. 7=domingo)
        monthly_day: Día del mes para el backup mensual (0 = deshabilitado)
        weekly_day: Día de la semana para el backup semanal (0 = deshabilitado)
        retention: Retención por periodo

    Returns:
        Tupla (periodo, cantidad a conservar)
    """
    if monthly_day and day_of_month == monthly_day and retention.is_enabled(BackupPeriod.MONTHLY):
        period = BackupPeriod.MONTHLY
    elif weekly_day and day_of_week == weekly_day and retention.is_enabled(BackupPeriod.WEEKLY):
        period = BackupPeriod.WEEKLY
    else:
        period = BackupPeriod.DAILY
    return period, retention.keep_for(period)


class PeriodService:
    """Servicio que selecciona el periodo de la ejecución"""

    def __init__(self, config: BackupConfig):
        self.config = config

    def classify(self, today: date) -> Tuple[BackupPeriod, int]:
        return classify_period(
            today.day,
            today.isoweekday(),
            self.config.domonthly,
            self.config.doweekly,
            self.config.retention,
        )
