from __future__ import annotations

import json
import logging
import secrets
from typing import Any, Mapping, Optional

from edgeconsole.blob_store import FilesystemBlobStore
from edgeconsole.models import Snapshot
from edgeconsole.repositories import JobRepository, SnapshotRepository
from edgeconsole.services import demo_data
from edgeconsole.services.base import NotFoundError, ValidationError
from edgeconsole.utils.timestamps import utc_now, utc_now_iso
from edgeconsole.utils.validators import (
    sanitize_string,
    validate_bool,
    validate_container_name,
    validate_optional_string,
    validate_required_fields,
)

logger = logging.getLogger(__name__)

# Snapshot config fields restored by each restore option.
RESTORE_GROUPS = {
    'restoreEnv': ('envVars',),
    'restoreConfig': ('instanceType', 'maxInstances', 'sleepAfter', 'defaultPort', 'healthCheck'),
    'restoreNetworking': ('networkRules',),
}
DEFAULT_RESTORE_OPTIONS = {
    'restoreEnv': True,
    'restoreConfig': True,
    'restoreNetworking': True,
    'createBackupFirst': False,
}


def snapshot_key(container_name: str) -> str:
    stamp = int(utc_now().timestamp() * 1000)
    return f'snapshots/{container_name}/{stamp}-{secrets.token_hex(4)}.json'


class SnapshotService:
    """Point-in-time configuration snapshots stored in the blob store."""

    def __init__(self, snapshot_repo: SnapshotRepository, job_repo: JobRepository, blob_store: FilesystemBlobStore):
        self._snapshot_repo = snapshot_repo
        self._job_repo = job_repo
        self._blob_store = blob_store

    def list_snapshots(self, container: Optional[str] = None) -> list[Snapshot]:
        return [Snapshot.from_row(row) for row in self._snapshot_repo.list_filtered(container)]

    def _load(self, snapshot_id: int) -> Snapshot:
        row = self._snapshot_repo.get_by_id(snapshot_id)
        if not row:
            raise NotFoundError('Snapshot not found')
        return Snapshot.from_row(row)

    def get_snapshot(self, snapshot_id: int) -> Snapshot:
        snapshot = self._load(snapshot_id)
        data = self._blob_store.get(snapshot.r2_key)
        if data is None:
            logger.warning('Snapshot %s blob %s is missing', snapshot_id, snapshot.r2_key)
        else:
            snapshot.config = json.loads(data)
        return snapshot

    def create(self, payload: Mapping[str, Any], created_by: Optional[str] = None, trigger: str = 'manual') -> Snapshot:
        ok, error = validate_required_fields(payload, ['containerName', 'name'])
        if not ok:
            raise ValidationError(error)
        container_name = payload['containerName']
        ok, error = validate_container_name(container_name)
        if not ok:
            raise ValidationError(error)
        for field in ('name', 'description'):
            ok, error = validate_optional_string(payload.get(field), field)
            if not ok:
                raise ValidationError(error)
        config = demo_data.snapshot_config(demo_data.container_config(container_name))
        data = json.dumps(config).encode('utf-8')

        key = snapshot_key(container_name)
        size = self._blob_store.put(key, data)
        snapshot_id = self._snapshot_repo.create(
            container_name=container_name,
            name=sanitize_string(payload['name']),
            description=payload.get('description'),
            r2_key=key,
            created_by=created_by,
            size_bytes=size,
            metadata={
                'trigger': trigger,
                'instanceType': config['instanceType'],
                'maxInstances': config['maxInstances'],
                'envVarCount': len(config['envVars']),
            },
        )
        logger.info('Created snapshot %s of %s at %s (%d bytes)', snapshot_id, container_name, key, size)
        snapshot = self._load(snapshot_id)
        snapshot.config = config
        return snapshot

    def delete(self, snapshot_id: int) -> None:
        snapshot = self._load(snapshot_id)
        self._blob_store.delete(snapshot.r2_key)
        self._snapshot_repo.delete(snapshot_id)
        logger.info('Deleted snapshot %s', snapshot_id)

    def stats(self) -> dict[str, Any]:
        return self._snapshot_repo.stats()

    def restore(self, snapshot_id: int, options: Optional[Mapping[str, Any]] = None, restored_by: Optional[str] = None) -> dict[str, Any]:
        options = {k: v for k, v in (options or {}).items() if k in DEFAULT_RESTORE_OPTIONS}
        for option, value in options.items():
            ok, error = validate_bool(value, option)
            if not ok:
                raise ValidationError(error)
        snapshot = self.get_snapshot(snapshot_id)
        if snapshot.config is None:
            raise NotFoundError('Snapshot data not found')
        opts = {**DEFAULT_RESTORE_OPTIONS, **options}

        backup_id = None
        if opts['createBackupFirst']:
            backup = self.create(
                {
                    'containerName': snapshot.container_name,
                    'name': f'Pre-restore backup ({snapshot.name})',
                    'description': f'Automatic backup before restoring snapshot {snapshot_id}',
                },
                created_by=restored_by,
                trigger='auto',
            )
            backup_id = backup.id

        current = demo_data.snapshot_config(demo_data.container_config(snapshot.container_name))
        changes = []
        for option, fields in RESTORE_GROUPS.items():
            if not opts[option]:
                continue
            for field in fields:
                old_value = current.get(field)
                new_value = snapshot.config.get(field)
                if old_value != new_value:
                    changes.append({'field': field, 'oldValue': old_value, 'newValue': new_value})

        self._job_repo.create(
            container_name=snapshot.container_name,
            operation='restore_snapshot',
            status='completed',
            metadata={
                'trigger': 'manual',
                'snapshotId': snapshot_id,
                'backupSnapshotId': backup_id,
                'options': opts,
                'changeCount': len(changes),
            },
        )
        logger.info('Restored snapshot %s onto %s (%d changes)', snapshot_id, snapshot.container_name, len(changes))
        return {
            'success': True,
            'snapshotId': snapshot_id,
            'containerName': snapshot.container_name,
            'restoredAt': utc_now_iso(),
            'backupSnapshotId': backup_id,
            'changes': changes,
        }
