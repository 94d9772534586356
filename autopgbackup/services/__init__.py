"""
Servicios de la aplicación
"""
from .backup_service import BackupService
from .cleanup_service import CleanupService
from .discovery_service import DiscoveryService
from .hook_service import HookService
from .period_service import PeriodService
from .pipeline_service import PipelineService
from .report_service import ReportService
from .scheduler_service import SchedulerService

__all__ = [
    'BackupService',
    'CleanupService',
    'DiscoveryService',
    'HookService',
    'PeriodService',
    'PipelineService',
    'ReportService',
    'SchedulerService'
]
