"""Built-in validation hooks for the bundled master tables.

Each hook checks only the fields present in the partial record, so the same
hook serves create and update. Missing required fields on create are caught
earlier by the entity service.
"""

import re
from datetime import date
from decimal import Decimal

from mastercrud.core.types import is_iso_date
from mastercrud.hooks.registry import HookRegistry
from mastercrud.hooks.types import HookContext, HookResult

EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$")

_MISSING = object()


def _value(ctx: HookContext, field: str):
    return ctx.record.get(field, _MISSING)


async def require_kode(ctx: HookContext) -> HookResult | None:
    kode = _value(ctx, "kode")
    if kode is _MISSING:
        return None
    if kode is None or not str(kode).strip():
        return HookResult(abort="kode is required")
    return None


async def validate_nama(ctx: HookContext) -> HookResult | None:
    nama = _value(ctx, "nama")
    if nama is _MISSING:
        return None
    if nama is None or len(str(nama).strip()) < 3:
        return HookResult(abort="nama must be at least 3 characters")
    return None


async def validate_email(ctx: HookContext) -> HookResult | None:
    email = _value(ctx, "email")
    if email is _MISSING or email is None:
        return None
    if not EMAIL_RE.match(str(email)):
        return HookResult(abort="invalid email")
    return None


async def validate_tanggal_lahir(ctx: HookContext) -> HookResult | None:
    value = _value(ctx, "tanggal_lahir")
    if value is _MISSING:
        return None
    if not isinstance(value, str) or not is_iso_date(value):
        return HookResult(abort="tanggal_lahir must be YYYY-MM-DD")
    if date.fromisoformat(value) > date.today():
        return HookResult(abort="tanggal_lahir cannot be in the future")
    return None


def _non_negative(field: str):
    async def check(ctx: HookContext) -> HookResult | None:
        value = _value(ctx, field)
        if value is _MISSING or value is None:
            return None
        if Decimal(str(value)) < 0:
            return HookResult(abort=f"{field} cannot be negative")
        return None

    check.__name__ = f"non_negative_{field}"
    return check


non_negative_harga = _non_negative("harga")
non_negative_stok = _non_negative("stok")


def register_builtin_hooks(registry: HookRegistry) -> None:
    """Register framework-provided hooks on ``registry``."""
    registry.register("requireKode", require_kode)
    registry.register("validateNama", validate_nama)
    registry.register("validateEmail", validate_email)
    registry.register("validateTanggalLahir", validate_tanggal_lahir)
    registry.register("nonNegativeHarga", non_negative_harga)
    registry.register("nonNegativeStok", non_negative_stok)
