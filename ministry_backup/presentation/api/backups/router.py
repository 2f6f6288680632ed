"""
Backups Router - Endpoints admin des sauvegardes.

Responsabilite unique:
----------------------
Exposer le declenchement manuel, le listing, la restauration et le
pilotage du scheduler. Delegue tout au BackupService / BackupScheduler.

Endpoints:
----------
- GET /admin/backups: Lister les backups
- POST /admin/backups: Lancer un backup
- POST /admin/backups/{filename}/restore: Restaurer un backup
- GET /admin/backups/scheduler: Etat du scheduler
- POST /admin/backups/scheduler/start: Demarrer le scheduler
- POST /admin/backups/scheduler/stop: Arreter le scheduler
"""

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ministry_backup.infrastructure.backup.scheduler import BackupScheduler
from ministry_backup.infrastructure.backup.service import BackupService
from ministry_backup.infrastructure.logging import get_logger
from ministry_backup.presentation.api.backups.schemas import (
    BackupInfoResponse,
    BackupListResponse,
    BackupResultResponse,
    RestoreRequest,
    RestoreResultResponse,
    SchedulerStatusResponse,
)
from ministry_backup.presentation.api.dependencies import (
    get_backup_scheduler,
    get_backup_service,
    require_admin,
)

logger = get_logger(__name__)

router = APIRouter(
    prefix="/admin/backups",
    tags=["Backups"],
    dependencies=[Depends(require_admin)],
)

# Code d'erreur du domaine -> statut HTTP (defaut: 500)
_ERROR_STATUS = {
    "INVALID_BACKUP_FILENAME": status.HTTP_400_BAD_REQUEST,
    "BACKUP_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "BACKUP_BUSY": status.HTTP_409_CONFLICT,
    "DATABASE_URL_MISSING": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _error_status(code: str | None) -> int:
    return _ERROR_STATUS.get(code or "", status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.get(
    "",
    response_model=BackupListResponse,
    summary="Lister les backups",
    description="Retourne les backups locaux, le plus recent en premier.",
)
def list_backups(service: BackupService = Depends(get_backup_service)):
    backups = service.list_backups()
    return BackupListResponse(
        items=[
            BackupInfoResponse(
                filename=info.filename,
                size_bytes=info.size_bytes,
                created_at=info.created_at,
            )
            for info in backups
        ],
        total=len(backups),
    )


@router.post(
    "",
    response_model=BackupResultResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Lancer un backup",
    description="Execute pg_dump immediatement et retourne le resultat.",
)
def create_backup(
    response: Response,
    service: BackupService = Depends(get_backup_service),
):
    """
    Lance un backup manuel.

    Le corps est toujours le BackupResult, y compris en cas d'echec.
    """
    logger.info("manual_backup_requested")
    result = service.run_backup()

    if not result.success:
        response.status_code = _error_status(result.code)

    return BackupResultResponse(**result.to_dict())


@router.post(
    "/{filename}/restore",
    response_model=RestoreResultResponse,
    summary="Restaurer un backup",
    description="Rejoue un dump sur la base en service. Operation destructive.",
)
def restore_backup(
    filename: str,
    data: RestoreRequest,
    response: Response,
    service: BackupService = Depends(get_backup_service),
):
    if not data.confirm:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Restore must be confirmed with {\"confirm\": true}",
        )

    logger.warning("manual_restore_requested", filename=filename)
    result = service.restore_backup(filename)

    if not result.success:
        response.status_code = _error_status(result.code)

    return RestoreResultResponse(**result.to_dict())


@router.get(
    "/scheduler",
    response_model=SchedulerStatusResponse,
    summary="Etat du scheduler",
)
def get_scheduler_status(scheduler: BackupScheduler = Depends(get_backup_scheduler)):
    return SchedulerStatusResponse(**scheduler.status())


@router.post(
    "/scheduler/start",
    response_model=SchedulerStatusResponse,
    summary="Demarrer le scheduler",
    description="Sans effet si deja demarre.",
)
def start_scheduler(scheduler: BackupScheduler = Depends(get_backup_scheduler)):
    """
    Demarre le scheduler.

    Raises:
        HTTPException 409 si BACKUP_ENABLED est faux, DATABASE_URL vide
        ou BACKUP_CRON invalide.
    """
    if not scheduler.start():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Scheduler not started: check BACKUP_ENABLED, DATABASE_URL and BACKUP_CRON",
        )
    return SchedulerStatusResponse(**scheduler.status())


@router.post(
    "/scheduler/stop",
    response_model=SchedulerStatusResponse,
    summary="Arreter le scheduler",
)
def stop_scheduler(scheduler: BackupScheduler = Depends(get_backup_scheduler)):
    scheduler.stop()
    return SchedulerStatusResponse(**scheduler.status())
