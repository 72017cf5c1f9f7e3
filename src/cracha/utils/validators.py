import logging
from cracha.config.settings import (
    ALLOWED_EXTENSIONS,
    MAX_PHOTO_BYTES,
    MAX_RADIUS_PERCENT,
    MIN_RADIUS_PERCENT
)
from cracha.core.errors import InvalidPhotoError, InvalidRadiusError
from cracha.core.models import InputPhoto

logger = logging.getLogger(__name__)

def validate_photo(photo: InputPhoto, allowed_extensions=ALLOWED_EXTENSIONS, max_bytes=MAX_PHOTO_BYTES):
    """
    Verifica se a foto pode entrar no processamento
    Args:
        photo: Foto recebida
        allowed_extensions: Extensões aceitas (minúsculas, com ponto)
        max_bytes: Tamanho máximo do arquivo (0 desabilita)
    Raises:
        InvalidPhotoError: quando a foto é rejeitada
    """
    if not photo.stem.strip():
        raise InvalidPhotoError(f"Nome de arquivo inválido: '{photo.filename}'")

    if allowed_extensions and photo.extension not in allowed_extensions:
        raise InvalidPhotoError(
            f"Tipo de arquivo não suportado: '{photo.extension or photo.filename}'"
        )

    if max_bytes and len(photo.data) > max_bytes:
        raise InvalidPhotoError(
            f"Arquivo muito grande: {len(photo.data)} bytes (máximo {max_bytes})"
        )

def validate_radius(radius_percent):
    """Garante raio adaptativo inteiro entre MIN_RADIUS_PERCENT e MAX_RADIUS_PERCENT"""
    if isinstance(radius_percent, bool) or not isinstance(radius_percent, int):
        raise InvalidRadiusError(f"Raio deve ser inteiro, recebido: {radius_percent!r}")

    if not MIN_RADIUS_PERCENT <= radius_percent <= MAX_RADIUS_PERCENT:
        raise InvalidRadiusError(
            f"Raio fora do intervalo {MIN_RADIUS_PERCENT}-{MAX_RADIUS_PERCENT}: {radius_percent}"
        )
