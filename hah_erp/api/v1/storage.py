"""
Descarga de archivos del almacenamiento local mediante token firmado.
"""

from fastapi import APIRouter, Query
from fastapi.responses import FileResponse

from hah_erp.services import storage_service

router = APIRouter()


@router.get("/download")
async def download(
    token: str = Query(..., description="Token de descarga firmado"),
):
    """
    Entrega el archivo referenciado por el token.
    Token inválido o expirado: 401. Archivo inexistente: 404.
    """
    path = storage_service.resolve_download(token)
    return FileResponse(path, media_type=storage_service.PDF_CONTENT_TYPE, filename=path.name)
