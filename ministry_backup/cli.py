"""
CLI des sauvegardes PostgreSQL.

Usage:
    ministry-backup run
    ministry-backup list
    ministry-backup prune
    ministry-backup restore backup_2024-01-01_03-00-00.sql.gz --yes
    ministry-backup worker [--health-port 8080]

Le worker demarre le scheduler (BACKUP_ENABLED=true requis) et bloque
jusqu'a Ctrl+C ou SIGTERM. Deploiement conseille: service "worker"
separe de l'application web.

Codes retour: 0 succes, 1 echec.
"""

import argparse
import json
import signal
import sys
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Optional, Sequence

from ministry_backup import __version__
from ministry_backup.infrastructure.backup.config import BackupSettings, get_backup_settings
from ministry_backup.infrastructure.backup.scheduler import BackupScheduler
from ministry_backup.infrastructure.backup.service import BackupService
from ministry_backup.infrastructure.logging import configure_logging, get_logger

logger = get_logger("ministry_backup.cli")


# ============================================================================
# HEALTH CHECK SERVER
# ============================================================================

def _make_health_handler(scheduler: BackupScheduler):
    """Cree un handler HTTP qui expose l'etat du scheduler."""

    class HealthHandler(BaseHTTPRequestHandler):
        def do_GET(self):
            if self.path != "/health":
                self.send_response(404)
                self.end_headers()
                return

            body = {
                "status": "healthy" if scheduler.is_running else "stopped",
                "service": "backup-worker",
                "next_run": scheduler.next_run.isoformat() if scheduler.next_run else None,
                "busy": scheduler.service.is_busy,
            }
            self.send_response(200 if scheduler.is_running else 503)
            self.send_header("Content-type", "application/json")
            self.end_headers()
            self.wfile.write(json.dumps(body).encode("utf-8"))

        def log_message(self, format, *args):
            # Silence les logs HTTP
            pass

    return HealthHandler


def start_health_server(port: int, scheduler: BackupScheduler) -> HTTPServer:
    """Demarre le serveur de healthcheck en background."""
    server = HTTPServer(("0.0.0.0", port), _make_health_handler(scheduler))
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    logger.info("health_server_started", port=port)
    return server


# ============================================================================
# COMMANDES
# ============================================================================

def cmd_run(args, settings: BackupSettings) -> int:
    result = BackupService(settings).run_backup()
    if not result.success:
        print(f"Backup failed: {result.error}", file=sys.stderr)
        return 1

    upload = "uploaded" if result.uploaded_to_s3 else "local only"
    print(
        f"{result.filename} ({result.size_bytes / 1024:.1f} KB, "
        f"{result.duration_ms} ms, {upload})"
    )
    return 0


def cmd_list(args, settings: BackupSettings) -> int:
    backups = BackupService(settings).list_backups()
    if args.json:
        print(json.dumps([info.to_dict() for info in backups], indent=2))
        return 0

    if not backups:
        print(f"No backups in {settings.backup_path}")
        return 0

    for info in backups:
        print(
            f"{info.filename}  {info.size_bytes / 1024:>10.1f} KB  "
            f"{info.created_at.isoformat(timespec='seconds')}"
        )
    return 0


def cmd_prune(args, settings: BackupSettings) -> int:
    removed = BackupService(settings).prune_old_backups()
    print(f"Removed {removed} backup(s) older than {settings.backup_retention_days} days")
    return 0


def cmd_restore(args, settings: BackupSettings) -> int:
    if not args.yes:
        print(
            "Restore overwrites the live database. Re-run with --yes to confirm.",
            file=sys.stderr,
        )
        return 1

    result = BackupService(settings).restore_backup(args.filename)
    if not result.success:
        print(f"Restore failed: {result.error}", file=sys.stderr)
        return 1

    print(f"Restored {result.filename} in {result.duration_ms} ms")
    return 0


def cmd_worker(args, settings: BackupSettings) -> int:
    scheduler = BackupScheduler(settings)
    if not scheduler.start():
        return 1

    server = start_health_server(args.health_port, scheduler) if args.health_port else None
    stop_event = threading.Event()

    def _handle_sigterm(signum, frame):
        stop_event.set()

    signal.signal(signal.SIGTERM, _handle_sigterm)

    try:
        while not stop_event.is_set():
            stop_event.wait(1.0)
    except KeyboardInterrupt:
        pass
    finally:
        logger.info("backup_worker_stopping")
        scheduler.stop()
        if server:
            server.shutdown()

    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ministry-backup",
        description="Sauvegardes PostgreSQL: dump, listing, purge, restauration, worker",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Lancer un backup maintenant")
    run.set_defaults(func=cmd_run)

    list_ = sub.add_parser("list", help="Lister les backups locaux")
    list_.add_argument("--json", action="store_true", help="Sortie JSON")
    list_.set_defaults(func=cmd_list)

    prune = sub.add_parser("prune", help="Supprimer les backups hors retention")
    prune.set_defaults(func=cmd_prune)

    restore = sub.add_parser("restore", help="Restaurer un backup (destructif)")
    restore.add_argument("filename", help="Nom du fichier, ex: backup_2024-01-01_03-00-00.sql.gz")
    restore.add_argument("--yes", action="store_true", help="Confirmer l'ecrasement de la base")
    restore.set_defaults(func=cmd_restore)

    worker = sub.add_parser("worker", help="Executer le scheduler jusqu'a l'arret")
    worker.add_argument("--health-port", type=int, default=None, help="Port du healthcheck HTTP")
    worker.set_defaults(func=cmd_worker)

    return parser


def main(argv: Optional[Sequence[str]] = None, settings: Optional[BackupSettings] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = settings or get_backup_settings()
    configure_logging(json_logs=settings.is_production, log_level=settings.log_level)
    return args.func(args, settings)


if __name__ == "__main__":
    sys.exit(main())
