"""
Tests para CleanupService (rotación por cantidad)
"""
import os
import unittest
from pathlib import Path
import tempfile
import shutil
import sys
from unittest import mock

sys.path.insert(0, str(Path(__file__).parent.parent))

from autopgbackup.models import BackupPeriod
from autopgbackup.services.cleanup_service import CleanupService

TIMESTAMPS = [
    "2024-03-01_02h00m",
    "2024-03-02_02h00m",
    "2024-03-03_02h00m",
    "2024-03-04_02h00m",
    "2024-03-05_02h00m",
]


class TestCleanupService(unittest.TestCase):
    """Tests para CleanupService"""

    def setUp(self):
        """Setup para tests"""
        self.temp_dir = Path(tempfile.mkdtemp())
        self.directory = self.temp_dir / "daily" / "app"
        self.directory.mkdir(parents=True)
        self.service = CleanupService()

    def tearDown(self):
        """Cleanup después de tests"""
        if self.temp_dir.exists():
            shutil.rmtree(self.temp_dir)

    def _create(self, name, content="backup"):
        path = self.directory / name
        path.write_text(content)
        return path

    def _create_backups(self, timestamps=TIMESTAMPS):
        return [self._create(f"app_{ts}.sql.gz") for ts in timestamps]

    def test_rotate_nonexistent_directory(self):
        """Test rotación de directorio inexistente"""
        deleted = self.service.rotate(self.temp_dir, "ghost", BackupPeriod.DAILY, 2)
        self.assertEqual(deleted, [])

    def test_keeps_newest(self):
        """5 archivos, conservar 2: quedan los 2 más nuevos y se registran 3 borrados"""
        self._create_backups()
        with self.assertLogs('autopgbackup', level='INFO') as logs:
            deleted = self.service.rotate(self.temp_dir, "app", BackupPeriod.DAILY, 2)

        self.assertEqual(len(deleted), 3)
        remaining = sorted(p.name for p in self.directory.iterdir())
        self.assertEqual(remaining, [f"app_{ts}.sql.gz" for ts in TIMESTAMPS[-2:]])
        deletion_lines = [line for line in logs.output if "Eliminado backup antiguo" in line]
        self.assertEqual(len(deletion_lines), 3)

    def test_rotation_is_idempotent(self):
        self._create_backups()
        self.service.rotate(self.temp_dir, "app", BackupPeriod.DAILY, 2)
        self.assertEqual(self.service.rotate(self.temp_dir, "app", BackupPeriod.DAILY, 2), [])

    def test_keep_more_than_existing(self):
        self._create_backups(TIMESTAMPS[:2])
        self.assertEqual(self.service.rotate(self.temp_dir, "app", BackupPeriod.DAILY, 5), [])
        self.assertEqual(len(list(self.directory.iterdir())), 2)

    def test_keeps_min_of_count_and_existing(self):
        for keep in range(1, 7):
            self._create_backups()
            self.service.rotate(self.temp_dir, "app", BackupPeriod.DAILY, keep)
            names = sorted(p.name for p in self.directory.iterdir())
            expected = TIMESTAMPS[-min(keep, len(TIMESTAMPS)):]
            self.assertEqual(names, [f"app_{ts}.sql.gz" for ts in expected])
            for path in self.directory.iterdir():
                path.unlink()

    def test_order_uses_name_not_mtime(self):
        """El mtime no influye en el orden de rotación"""
        paths = self._create_backups()
        # El archivo más nuevo por nombre queda con el mtime más antiguo
        os.utime(paths[-1], (1_000_000, 1_000_000))
        os.utime(paths[0], (2_000_000_000, 2_000_000_000))

        self.service.rotate(self.temp_dir, "app", BackupPeriod.DAILY, 1)
        self.assertEqual([p.name for p in self.directory.iterdir()], [paths[-1].name])

    def test_ignores_other_databases_with_same_prefix(self):
        self._create_backups()
        other = self._create("app_v2_2020-01-01_00h00m.sql.gz")
        stray = self._create("app_notes.txt")
        self.service.rotate(self.temp_dir, "app", BackupPeriod.DAILY, 1)
        self.assertTrue(other.exists())
        self.assertTrue(stray.exists())

    def test_rotates_only_requested_period(self):
        self._create_backups()
        weekly = self.temp_dir / "weekly" / "app"
        weekly.mkdir(parents=True)
        (weekly / "app_2020-01-01_00h00m.sql").write_text("old")
        self.service.rotate(self.temp_dir, "app", BackupPeriod.DAILY, 1)
        self.assertTrue((weekly / "app_2020-01-01_00h00m.sql").exists())

    def test_deletion_error_does_not_abort(self):
        """Un error al borrar se registra como advertencia y se sigue"""
        paths = self._create_backups()
        original_unlink = Path.unlink

        def flaky_unlink(path, *args, **kwargs):
            if path.name == paths[1].name:
                raise PermissionError("denied")
            return original_unlink(path, *args, **kwargs)

        with mock.patch.object(Path, 'unlink', autospec=True, side_effect=flaky_unlink):
            with self.assertLogs('autopgbackup', level='WARNING') as logs:
                deleted = self.service.rotate(self.temp_dir, "app", BackupPeriod.DAILY, 2)

        self.assertEqual(len(deleted), 2)
        self.assertTrue(paths[1].exists())
        self.assertFalse(paths[0].exists())
        self.assertFalse(paths[2].exists())
        self.assertTrue(any("denied" in line for line in logs.output))

    def test_database_with_glob_characters(self):
        directory = self.temp_dir / "daily" / "a[1]"
        directory.mkdir(parents=True)
        for ts in TIMESTAMPS:
            (directory / f"a[1]_{ts}.sql").write_text("x")
        deleted = self.service.rotate(self.temp_dir, "a[1]", BackupPeriod.DAILY, 2)
        self.assertEqual(len(deleted), 3)

    def test_get_backup_stats_empty_dir(self):
        """Test estadísticas de directorio vacío"""
        stats = self.service.get_backup_stats(self.temp_dir)
        self.assertEqual(stats['total_files'], 0)
        self.assertEqual(stats['total_size_mb'], 0)

    def test_get_backup_stats_with_files(self):
        """Test estadísticas con archivos"""
        self._create_backups()
        self._create("README.txt")

        stats = self.service.get_backup_stats(self.temp_dir)
        self.assertEqual(stats['total_files'], 5)
        self.assertGreater(stats['total_size_mb'], 0)
        self.assertEqual(stats['oldest_backup'], TIMESTAMPS[0])
        self.assertEqual(stats['newest_backup'], TIMESTAMPS[-1])


if __name__ == '__main__':
    unittest.main()
