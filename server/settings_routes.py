"""API routes for runtime settings.

Stored settings take precedence over environment variables, so saving a value
here reconfigures the workflow server and model provider without a restart.
"""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from server import settings_db

router = APIRouter()

MASK = "****"


def mask_secret(value: str) -> str:
    """Hide all but the last four characters of a secret."""
    if len(value) <= 4:
        return MASK
    return MASK + value[-4:]


class SaveSettingsResponse(BaseModel):
    success: bool = True
    updated: list[str]


@router.get("/settings")
def read_settings() -> dict[str, str]:
    """all stored settings, secrets masked."""
    return {
        row.key: mask_secret(row.value) if row.is_secret else row.value
        for row in settings_db.get_all()
    }


@router.post("/settings")
def save_settings(values: dict[str, str | int | float | bool | None]) -> SaveSettingsResponse:
    """upsert a flat {key: value} object.

    A value that is still the masked form of the stored secret is skipped, so
    posting back what GET returned does not overwrite secrets.
    """
    updated = []
    for key, value in values.items():
        if not key.strip():
            raise HTTPException(status_code=400, detail="Setting keys must not be empty")
        if value is None:
            continue
        value = str(value)
        is_secret = settings_db.is_secret_key(key)
        if is_secret and value.startswith(MASK):
            current = settings_db.get_value(key)
            if current is not None and mask_secret(current) == value:
                continue
        settings_db.set_value(key, value, is_secret)
        updated.append(key)
    return SaveSettingsResponse(updated=updated)


@router.delete("/settings/{key}")
def delete_setting(key: str) -> dict:
    """remove a stored setting so the environment value applies again."""
    if settings_db.get_value(key) is None:
        raise HTTPException(status_code=404, detail=f"Setting not found: {key}")
    settings_db.delete_value(key)
    return {"success": True}
