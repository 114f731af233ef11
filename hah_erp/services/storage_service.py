"""
Almacenamiento de archivos (resultados de laboratorio en PDF).

Dos backends:
- supabase: API REST de Supabase Storage vía httpx (service key).
- local: disco bajo STORAGE_LOCAL_DIR; las URLs firmadas apuntan a
  /storage/download con un JWT de tipo download.

Los nombres se generan como <carpeta>/<epoch-ms>-<aleatorio6>.<ext>.
"""

import logging
import secrets
import string
import time
from pathlib import Path

import httpx
import jwt
from fastapi.concurrency import run_in_threadpool

from hah_erp.auth.jwt import TokenType, create_download_token, decode_token
from hah_erp.config import get_settings
from hah_erp.core.exceptions import (
    CredentialsException,
    NotFoundException,
    StorageException,
    ValidationException,
)

settings = get_settings()
logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"
PDF_CONTENT_TYPE = "application/pdf"
_RANDOM_ALPHABET = string.ascii_lowercase + string.digits


# ── Helpers ──────────────────────────────────────────


def build_object_name(folder: str | None, filename: str) -> str:
    """<carpeta>/<epoch-ms>-<aleatorio6>.<ext>"""
    extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else "bin"
    random_part = "".join(secrets.choice(_RANDOM_ALPHABET) for _ in range(6))
    name = f"{int(time.time() * 1000)}-{random_part}.{extension}"
    folder = (folder or "").strip("/")
    return f"{folder}/{name}" if folder else name


def validate_pdf(filename: str | None, content_type: str | None, content: bytes) -> None:
    """Acepta solo PDFs reales dentro del tamaño permitido."""
    is_pdf_type = (content_type or "").lower() == PDF_CONTENT_TYPE
    is_pdf_name = (filename or "").lower().endswith(".pdf")
    if not (is_pdf_type or is_pdf_name):
        raise ValidationException("Solo se permiten archivos PDF")
    if not content:
        raise ValidationException("El archivo está vacío")
    if len(content) > settings.STORAGE_MAX_PDF_BYTES:
        max_mb = settings.STORAGE_MAX_PDF_BYTES // (1024 * 1024)
        raise ValidationException(f"El archivo supera el máximo de {max_mb} MB")
    if not content.startswith(PDF_MAGIC):
        raise ValidationException("El archivo no es un PDF válido")


def _local_path(bucket: str, path: str) -> Path:
    base = Path(settings.STORAGE_LOCAL_DIR).resolve()
    target = (base / bucket / path).resolve()
    if base not in target.parents:
        raise ValidationException("Ruta de archivo inválida")
    return target


def _write_local(target: Path, content: bytes) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(content)


def _delete_local(target: Path) -> bool:
    if not target.exists():
        return False
    target.unlink()
    return True


def _supabase_headers(content_type: str | None = None) -> dict:
    headers = {
        "Authorization": f"Bearer {settings.SUPABASE_SERVICE_KEY}",
        "apikey": settings.SUPABASE_SERVICE_KEY,
    }
    if content_type:
        headers["Content-Type"] = content_type
    return headers


async def _supabase_request(method: str, endpoint: str, **kwargs) -> httpx.Response:
    url = f"{settings.SUPABASE_URL.rstrip('/')}/storage/v1/{endpoint}"
    try:
        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.request(method, url, **kwargs)
    except httpx.TimeoutException as e:
        logger.error("Timeout en Supabase Storage (%s %s)", method, endpoint)
        raise StorageException("Timeout al comunicar con el almacenamiento") from e
    except httpx.RequestError as e:
        logger.error("Error de conexión con Supabase Storage: %s", e)
        raise StorageException(f"Error de conexión con el almacenamiento: {e}") from e

    if response.status_code >= 400:
        logger.error(
            "Supabase Storage %s %s respondió %s: %s",
            method, endpoint, response.status_code, response.text,
        )
        raise StorageException(
            f"El almacenamiento rechazó la operación ({response.status_code})"
        )
    return response


# ── Operaciones ──────────────────────────────────────


async def upload_file(
    bucket: str,
    folder: str | None,
    filename: str,
    content: bytes,
    content_type: str = PDF_CONTENT_TYPE,
) -> str:
    """Sube el archivo y retorna su ruta dentro del bucket."""
    path = build_object_name(folder, filename)

    if settings.supabase_enabled:
        await _supabase_request(
            "POST",
            f"object/{bucket}/{path}",
            content=content,
            headers={**_supabase_headers(content_type), "x-upsert": "false"},
        )
    else:
        await run_in_threadpool(_write_local, _local_path(bucket, path), content)

    logger.info("Archivo subido a %s/%s (%d bytes)", bucket, path, len(content))
    return path


async def remove_file(bucket: str, path: str) -> None:
    if settings.supabase_enabled:
        await _supabase_request(
            "DELETE",
            f"object/{bucket}",
            json={"prefixes": [path]},
            headers=_supabase_headers("application/json"),
        )
        return

    if not await run_in_threadpool(_delete_local, _local_path(bucket, path)):
        logger.info("Archivo %s/%s no existe en disco; nada que eliminar", bucket, path)


async def create_signed_url(bucket: str, path: str, expires_in: int | None = None) -> str:
    """URL temporal de descarga (por defecto STORAGE_SIGNED_URL_EXPIRES segundos)."""
    expires_in = expires_in or settings.STORAGE_SIGNED_URL_EXPIRES

    if settings.supabase_enabled:
        response = await _supabase_request(
            "POST",
            f"object/sign/{bucket}/{path}",
            json={"expiresIn": expires_in},
            headers=_supabase_headers("application/json"),
        )
        signed = response.json().get("signedURL") or response.json().get("signedUrl")
        if not signed:
            raise StorageException("El almacenamiento no devolvió una URL firmada")
        return f"{settings.SUPABASE_URL.rstrip('/')}/storage/v1{signed}"

    token = create_download_token(bucket, path, expires_in)
    base = settings.PUBLIC_BASE_URL.rstrip("/")
    return f"{base}{settings.API_V1_PREFIX}/storage/download?token={token}"


def resolve_download(token: str) -> Path:
    """Valida un token de descarga local y retorna la ruta del archivo."""
    try:
        payload = decode_token(token)
    except jwt.InvalidTokenError as e:
        raise CredentialsException("Enlace de descarga inválido o expirado") from e

    if payload.get("type") != TokenType.DOWNLOAD:
        raise CredentialsException("Enlace de descarga inválido o expirado")

    target = _local_path(payload.get("bucket", ""), payload.get("path", ""))
    if not target.is_file():
        raise NotFoundException("Archivo")
    return target
