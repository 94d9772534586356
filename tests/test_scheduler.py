"""
Tests para SchedulerService
"""
import sys
import unittest
from pathlib import Path
from unittest import mock

sys.path.insert(0, str(Path(__file__).parent.parent))

from autopgbackup.services.scheduler_service import SchedulerService


class TestSchedulerService(unittest.TestCase):
    """Tests para SchedulerService"""

    def test_no_schedules(self):
        service = SchedulerService(lambda: 0, [])
        self.assertEqual(service.get_next_run(), "No hay ejecuciones programadas")

    def test_start_registers_daily_jobs_and_stops(self):
        job = mock.Mock(return_value=0)
        service = SchedulerService(job, ["02:00", "14:30"])

        def stop_after_first_poll(seconds):
            self.assertEqual(len(service.scheduler.get_jobs()), 2)
            service.stop()

        with mock.patch('autopgbackup.services.scheduler_service.time.sleep',
                        side_effect=stop_after_first_poll), \
                mock.patch('autopgbackup.services.scheduler_service.signal.signal'):
            service.start()

        self.assertFalse(service.running)
        self.assertEqual(service.scheduler.get_jobs(), [])

    def test_failed_job_is_logged(self):
        service = SchedulerService(mock.Mock(return_value=1), ["02:00"])
        with self.assertLogs('autopgbackup', level='WARNING'):
            service._run_job()
        service.job.assert_called_once_with()


if __name__ == '__main__':
    unittest.main()
