"""
Backup Codec Module

Serializes the whole record store into a restorable text payload and
validates payloads on import. The schema is stable across versions of the
app: {"version": 1, "data": {"hourlyWage", "year", "yearData"}}.
"""

import json
import math

BACKUP_VERSION = 1


class BackupFormatError(ValueError):
    """Raised when an import payload does not match the backup schema."""
    pass


def export_backup(state: dict) -> str:
    """
    Serialize store state for export.

    Args:
        state: Store state as returned by RecordStore.to_dict()

    Returns:
        Compact JSON string
    """
    payload = {
        "version": BACKUP_VERSION,
        "data": state,
    }
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def import_backup(text: str) -> dict:
    """
    Parse and validate an exported backup.

    Args:
        text: Backup text as produced by export_backup()

    Returns:
        The state dict contained in the payload

    Raises:
        BackupFormatError: If the text is not a valid version 1 backup
    """
    if not text or not text.strip():
        raise BackupFormatError("復元するデータが空です。")

    try:
        payload = json.loads(text.strip())
    except json.JSONDecodeError as e:
        raise BackupFormatError(f"復元に失敗しました。({e})") from e

    if not isinstance(payload, dict) or payload.get("version") != BACKUP_VERSION:
        raise BackupFormatError("形式が違います。")

    data = payload.get("data")
    if not isinstance(data, dict) or not data:
        raise BackupFormatError("形式が違います。")

    if (
        not _is_number(data.get("hourlyWage"))
        or not _is_number(data.get("year"))
        or not isinstance(data.get("yearData"), dict)
    ):
        raise BackupFormatError("形式が違います。")

    if (
        not math.isfinite(data["hourlyWage"])
        or data["hourlyWage"] < 0
        or not math.isfinite(data["year"])
    ):
        raise BackupFormatError("形式が違います。")

    return data
