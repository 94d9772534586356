"""
Tests para la clasificación del periodo
"""
import itertools
import unittest
from datetime import date
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from autopgbackup.models import BackupConfig, BackupPeriod, RetentionPolicy
from autopgbackup.services.period_service import PeriodService, classify_period

RETENTION = RetentionPolicy(daily=14, weekly=5, monthly=12)


class TestClassifyPeriod(unittest.TestCase):
    """Tests para classify_period"""

    def test_monthly_day(self):
        self.assertEqual(
            classify_period(1, 3, monthly_day=1, weekly_day=6, retention=RETENTION),
            (BackupPeriod.MONTHLY, 12)
        )

    def test_weekly_day(self):
        self.assertEqual(
            classify_period(9, 6, monthly_day=1, weekly_day=6, retention=RETENTION),
            (BackupPeriod.WEEKLY, 5)
        )

    def test_monthly_beats_weekly(self):
        """Mensual tiene prioridad cuando coinciden ambos días"""
        period, keep = classify_period(1, 6, monthly_day=1, weekly_day=6, retention=RETENTION)
        self.assertEqual(period, BackupPeriod.MONTHLY)

    def test_daily_otherwise(self):
        self.assertEqual(
            classify_period(10, 3, monthly_day=1, weekly_day=6, retention=RETENTION),
            (BackupPeriod.DAILY, 14)
        )

    def test_day_zero_disables(self):
        period, _ = classify_period(1, 6, monthly_day=0, weekly_day=0, retention=RETENTION)
        self.assertEqual(period, BackupPeriod.DAILY)

    def test_zero_retention_disables_period(self):
        retention = RetentionPolicy(daily=14, weekly=0, monthly=0)
        period, keep = classify_period(1, 6, monthly_day=1, weekly_day=6, retention=retention)
        self.assertEqual((period, keep), (BackupPeriod.DAILY, 14))

    def test_negative_retention_falls_through_to_weekly(self):
        retention = RetentionPolicy(daily=14, weekly=5, monthly=-1)
        period, _ = classify_period(1, 6, monthly_day=1, weekly_day=6, retention=retention)
        self.assertEqual(period, BackupPeriod.WEEKLY)

    def test_daily_retention_may_be_zero(self):
        retention = RetentionPolicy(daily=0, weekly=5, monthly=12)
        self.assertEqual(
            classify_period(10, 3, monthly_day=1, weekly_day=6, retention=retention),
            (BackupPeriod.DAILY, 0)
        )

    def test_disabled_periods_are_never_selected(self):
        """Ninguna combinación de fecha selecciona un periodo deshabilitado"""
        configs = [
            (0, 6, RETENTION),
            (1, 0, RETENTION),
            (1, 6, RetentionPolicy(daily=3, weekly=0, monthly=12)),
            (1, 6, RetentionPolicy(daily=3, weekly=5, monthly=0)),
        ]
        for monthly_day, weekly_day, retention in configs:
            for dom, dow in itertools.product(range(1, 32), range(1, 8)):
                period, keep = classify_period(dom, dow, monthly_day, weekly_day, retention)
                if period is BackupPeriod.MONTHLY:
                    self.assertTrue(monthly_day and retention.monthly > 0)
                    self.assertEqual(dom, monthly_day)
                if period is BackupPeriod.WEEKLY:
                    self.assertTrue(weekly_day and retention.weekly > 0)
                    self.assertEqual(dow, weekly_day)
                self.assertEqual(keep, retention.keep_for(period))


class TestPeriodService(unittest.TestCase):
    """Tests para PeriodService"""

    def setUp(self):
        self.service = PeriodService(BackupConfig(backup_dir=Path("/tmp"), doweekly=6, domonthly=1))

    def test_classify_uses_iso_weekday(self):
        # 2024-03-09 es sábado (ISO 6)
        self.assertEqual(self.service.classify(date(2024, 3, 9))[0], BackupPeriod.WEEKLY)

    def test_classify_first_of_month(self):
        self.assertEqual(self.service.classify(date(2024, 3, 1))[0], BackupPeriod.MONTHLY)

    def test_classify_regular_day(self):
        # 2024-03-12 es martes
        self.assertEqual(self.service.classify(date(2024, 3, 12)), (BackupPeriod.DAILY, 14))


if __name__ == '__main__':
    unittest.main()
