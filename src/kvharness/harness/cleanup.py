# src/kvharness/harness/cleanup.py
"""Vault cleanup sweeps run before tests that need an empty vault.

remove_all_*: list every active object page by page, start a delete on
each, poll every delete to completion, purge the soft-deleted object, then
sleep so the purges propagate.

clean_up_*: purge everything that is already soft-deleted, then sleep.

All calls are sequential. Service errors propagate to the caller.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from kvharness.contracts.enums import VaultObjectKind
from kvharness.core.logging import get_logger
from kvharness.harness.paging import PageCursor, drain_pages
from kvharness.harness.polling import poll_until_done
from kvharness.harness.transport import PURGE_PROPAGATION_SECONDS

if TYPE_CHECKING:
    from azure.keyvault.certificates import CertificateClient
    from azure.keyvault.keys import KeyClient

logger = get_logger(__name__)


@dataclass(frozen=True)
class _SweepOps:
    """The four client calls a sweep needs, for one object kind."""

    kind: VaultObjectKind
    list_active: Callable[[], Any]
    begin_delete: Callable[..., Any]
    purge: Callable[[str], Any]
    list_deleted: Callable[[], Any]


def _key_ops(client: KeyClient) -> _SweepOps:
    return _SweepOps(
        kind=VaultObjectKind.KEYS,
        list_active=client.list_properties_of_keys,
        begin_delete=client.begin_delete_key,
        purge=client.purge_deleted_key,
        list_deleted=client.list_deleted_keys,
    )


def _certificate_ops(client: CertificateClient) -> _SweepOps:
    return _SweepOps(
        kind=VaultObjectKind.CERTIFICATES,
        list_active=client.list_properties_of_certificates,
        begin_delete=client.begin_delete_certificate,
        purge=client.purge_deleted_certificate,
        list_deleted=client.list_deleted_certificates,
    )


def _remove_all(ops: _SweepOps, *, polling_interval: float, wait_for_purge: bool, purge_wait: float) -> list[str]:
    operations: list[Any] = []
    cursor = PageCursor(ops.list_active())
    while cursor.has_page():
        for item in cursor.items:
            # _polling_interval is the SDK poller's own sleep between status checks
            operations.append(ops.begin_delete(item.name, _polling_interval=polling_interval))
        cursor.move_to_next_page()

    if not operations:
        return []

    logger.info("vault_cleanup_started", kind=ops.kind.value, count=len(operations))
    purged: list[str] = []
    for operation in operations:
        deleted = poll_until_done(operation, polling_interval)
        ops.purge(deleted.name)
        purged.append(deleted.name)
        logger.info("Deleted and purged", kind=ops.kind.value, name=deleted.name)
    logger.info("vault_cleanup_completed", kind=ops.kind.value, count=len(purged))

    if wait_for_purge:
        time.sleep(purge_wait)
    return purged


def _purge_deleted(ops: _SweepOps, *, purge_wait: float) -> list[str]:
    deleted = drain_pages(ops.list_deleted())
    if not deleted:
        return []

    names = [item.name for item in deleted]
    for name in names:
        ops.purge(name)
    logger.info("deleted_objects_purged", kind=ops.kind.value, count=len(names))
    time.sleep(purge_wait)
    return names


def remove_all_keys_from_vault(
    client: KeyClient,
    *,
    polling_interval: float,
    wait_for_purge: bool = True,
    purge_wait: float = PURGE_PROPAGATION_SECONDS,
) -> list[str]:
    """Delete and purge every key in the vault.

    Args:
        client: Key client bound to the vault
        polling_interval: Seconds between delete status checks
        wait_for_purge: Sleep purge_wait seconds after the last purge
        purge_wait: Purge propagation delay (seconds)

    Returns:
        Names of the purged keys (empty if the vault had none)
    """
    return _remove_all(_key_ops(client), polling_interval=polling_interval, wait_for_purge=wait_for_purge, purge_wait=purge_wait)


def clean_up_key_vault(client: KeyClient, *, purge_wait: float = PURGE_PROPAGATION_SECONDS) -> list[str]:
    """Purge every soft-deleted key.

    Returns:
        Names of the purged keys
    """
    return _purge_deleted(_key_ops(client), purge_wait=purge_wait)


def remove_all_certificates_from_vault(
    client: CertificateClient,
    *,
    polling_interval: float,
    wait_for_purge: bool = True,
    purge_wait: float = PURGE_PROPAGATION_SECONDS,
) -> list[str]:
    """Delete and purge every certificate in the vault.

    Same contract as remove_all_keys_from_vault.
    """
    return _remove_all(
        _certificate_ops(client), polling_interval=polling_interval, wait_for_purge=wait_for_purge, purge_wait=purge_wait
    )


def clean_up_certificate_vault(client: CertificateClient, *, purge_wait: float = PURGE_PROPAGATION_SECONDS) -> list[str]:
    """Purge every soft-deleted certificate."""
    return _purge_deleted(_certificate_ops(client), purge_wait=purge_wait)
